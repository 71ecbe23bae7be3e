from rest_framework import serializers

from .models import TargetType, Transaction, TransactionStatus


class TransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Transaction
        fields = [
            "id", "user", "target_type", "target_id", "amount", "currency", "status",
            "reference", "settled_at", "created_at", "updated_at",
        ]
        read_only_fields = fields


class TransactionCreateSerializer(serializers.Serializer):
    target_type = serializers.ChoiceField(choices=TargetType.choices)
    target_id = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField(max_length=8, required=False)
    reference = serializers.CharField(max_length=120, required=False, allow_blank=True)


class TransactionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TransactionStatus.choices)
