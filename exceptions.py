"""QRoyal exceptions."""


class QroyalError(Exception):
    """
    Structured exception for loyalty operations.

    Carries a stable ``code`` for callers and views, a human message and
    any extra context passed as keyword arguments.

    Usage:
        try:
            customer_service.signup(phone, password)
        except QroyalError as e:
            if e.code == "DUPLICATE_PHONE":
                handle_duplicate()
    """

    _default_messages = {
        "CUSTOMER_NOT_FOUND": "Customer not found",
        "BUSINESS_NOT_FOUND": "Business not found",
        "MEMBERSHIP_NOT_FOUND": "Membership not found",
        "DISCOUNT_NOT_FOUND": "Discount not found",
        "DUPLICATE_PHONE": "This phone number is already registered",
        "DUPLICATE_EMAIL": "A business with this email already exists",
        "INVALID_INPUT": "Invalid input",
        "INVALID_CREDENTIALS": "Invalid credentials",
    }

    def __init__(self, code: str, message: str | None = None, **context):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.context = context
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.context}
