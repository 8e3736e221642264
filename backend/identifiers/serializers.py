from rest_framework import serializers

from .swiss import IdentifierKind, ValidationState

# Free-form keystroke input; anything longer cannot be a Swiss identifier.
MAX_IDENTIFIER_INPUT_LENGTH = 256


class IdentifierInputSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=[kind.value for kind in IdentifierKind])
    value = serializers.CharField(
        allow_blank=True,
        trim_whitespace=False,
        max_length=MAX_IDENTIFIER_INPUT_LENGTH,
    )


class IdentifierValidateSerializer(IdentifierInputSerializer):
    auto_format = serializers.BooleanField(required=False, default=True)


class IdentifierFormatResponseSerializer(serializers.Serializer):
    kind = serializers.CharField()
    value = serializers.CharField()
    formatted = serializers.CharField()


class IdentifierValidateResponseSerializer(IdentifierFormatResponseSerializer):
    state = serializers.ChoiceField(choices=[state.value for state in ValidationState])
    reason = serializers.CharField(allow_null=True)
    message = serializers.CharField(allow_blank=True)
