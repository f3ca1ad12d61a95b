import secrets
import string
import time

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def generate_reference(prefix="GH", separator="", length=6):
    """
    Build a payment reference from the clock and a random base-36 fragment.

    GH1718031234567K3J9QZ   (processors)
    DON_1718031234567_...   (Paystack checkout)
    """
    millis = int(time.time() * 1000)
    fragment = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))
    return separator.join([prefix, str(millis), fragment]).upper()
