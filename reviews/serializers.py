from rest_framework import serializers

from accounts.display_names import resolve_display_name

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    author_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ["id", "author", "author_name", "target_type", "target_id", "rating", "comment", "created_at"]
        read_only_fields = ["id", "author", "created_at"]

    def get_author_name(self, obj):
        return resolve_display_name(obj.author_id)
