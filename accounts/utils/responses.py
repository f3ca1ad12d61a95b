from rest_framework import status
from rest_framework.response import Response


def first_error_message(errors):
    """
    Pull a readable message out of a (possibly nested) serializer error dict.
    """
    if isinstance(errors, dict):
        for value in errors.values():
            message = first_error_message(value)
            if message:
                return message
    elif isinstance(errors, (list, tuple)):
        for value in errors:
            message = first_error_message(value)
            if message:
                return message
    elif errors:
        return str(errors)
    return None


def error_response(message, status_code=status.HTTP_400_BAD_REQUEST, **extra):
    return Response({"message": message, **extra}, status=status_code)


def validation_error_response(serializer, message=None):
    return error_response(
        message or first_error_message(serializer.errors) or "Invalid request",
        errors=serializer.errors,
    )
