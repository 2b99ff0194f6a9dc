from rest_framework import serializers

from .models import OperatorNotification


class OperatorNotificationSerializer(serializers.ModelSerializer):
    machine_id = serializers.IntegerField(read_only=True)
    machine_name = serializers.CharField(source='machine.name', read_only=True)
    job_sheet_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = OperatorNotification
        fields = ['id', 'machine_id', 'machine_name', 'job_sheet_id', 'type', 'title', 'message', 'data',
                  'read', 'created_at', 'updated_at']
        read_only_fields = fields

