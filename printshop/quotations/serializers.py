from rest_framework import serializers

from .models import QuotationNote, QuotationRequest

REQUIRED_FIELDS = ('client_name', 'client_email', 'project_title', 'print_type', 'paper_type', 'paper_size',
                   'quantity', 'color_type')


class QuotationRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuotationRequest
        fields = [
            'id', 'client_name', 'client_email', 'client_phone', 'company_name', 'project_title',
            'project_description', 'print_type', 'paper_type', 'paper_size', 'quantity', 'pages',
            'color_type', 'binding_type', 'lamination', 'folding', 'cutting', 'status', 'estimated_price',
            'final_price', 'invoice_number', 'invoice_date', 'created_at', 'updated_at'
        ]
        read_only_fields = ['status', 'estimated_price', 'final_price', 'invoice_number', 'invoice_date',
                            'created_at', 'updated_at']

    def to_internal_value(self, data):
        missing = [field for field in REQUIRED_FIELDS if data.get(field) in (None, '')]
        if missing:
            raise serializers.ValidationError(f"Missing required fields: {', '.join(missing)}")
        return super().to_internal_value(data)


class QuotationUpdateSerializer(serializers.ModelSerializer):
    """Staff edits: status and pricing"""
    estimated_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0,
                                               required=False, allow_null=True)
    final_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0,
                                           required=False, allow_null=True)

    class Meta:
        model = QuotationRequest
        fields = ['status', 'estimated_price', 'final_price']
        extra_kwargs = {'status': {'error_messages': {'invalid_choice': 'Invalid quotation status'}}}


class QuotationNoteSerializer(serializers.ModelSerializer):
    quotation_id = serializers.UUIDField(read_only=True)
    note = serializers.CharField(error_messages={
        'required': 'Note is required',
        'blank': 'Note is required',
    })

    class Meta:
        model = QuotationNote
        fields = ['id', 'quotation_id', 'note', 'created_by', 'created_at']
        read_only_fields = ['created_by', 'created_at']
