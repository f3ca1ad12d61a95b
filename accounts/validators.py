import re
from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _


class ComplexityValidator:
    """
    Validate whether the password contains an uppercase letter, a lowercase letter and a digit.
    """
    def validate(self, password, user=None):
        if not re.search(r'[A-Z]', password):
            raise ValidationError(
                _("The password must contain at least one uppercase letter."),
                code='password_no_upper',
            )
        if not re.search(r'[a-z]', password):
            raise ValidationError(
                _("The password must contain at least one lowercase letter."),
                code='password_no_lower',
            )
        if not re.search(r'\d', password):
            raise ValidationError(
                _("The password must contain at least one digit."),
                code='password_no_digit',
            )

    def get_help_text(self):
        return _(
            "Your password must contain uppercase, lowercase, and numbers."
        )


PHONE_PATTERN = re.compile(r'^\+?[1-9]\d{0,15}$')


def validate_phone_number(value):
    if value and not PHONE_PATTERN.match(re.sub(r'\s', '', value)):
        raise ValidationError(_("Please enter a valid phone number"), code='invalid_phone')
