"""
User-facing message catalog.

Keys are looked up in the active Django language, then in
``DEFAULT_LANGUAGE``, then the key itself is returned.

Usage:
    from django.utils import translation
    from qroyal.i18n import translate

    with translation.override("el"):
        translate("customer_not_found")
    translate("points_awarded", points=2, name="Maria")
"""

from django.utils.translation import get_language

from qroyal.conf import qroyal_settings

CATALOG: dict[str, dict[str, str]] = {
    "en": {
        "customer_not_found": "Customer not found.",
        "business_not_found": "Business not found.",
        "membership_not_found": "You are not a member of this business.",
        "discount_not_found": "Discount not found.",
        "error_unexpected": "An unexpected error occurred.",
        "invalid_credentials": "Invalid email or password.",
        "invalid_input": "Please fill out all required fields.",
        "too_many_attempts": "Too many attempts. Please try again later.",
        "login_required": "Please log in to continue.",
        "qr_login_disabled": "Login with a QR code is disabled.",
        "points_awarded": "+{points} points for {name}!",
        "reward_earned": "{name} earned a reward!",
        "default_reward_message": "You have earned a free gift! Show this to the staff to claim your reward.",
        "not_a_customer_code": "This is not a customer code.",
        "unrecognized_code": "Unrecognized code.",
        "duplicate_scan": "This code was just scanned. Please wait before scanning again.",
        "join_success": "Welcome aboard",
        "leave_success": "You have left this business.",
        "duplicate_phone": "This phone number is already registered.",
        "duplicate_email": "A business with this email already exists.",
        "gift_won": "Congratulations!",
        "logged_out": "You have been logged out.",
        "settings_saved": "Settings saved.",
        "profile_saved": "Profile updated.",
        "account_deleted": "Your account has been deleted.",
    },
    "el": {
        "customer_not_found": "Ο πελάτης δεν βρέθηκε.",
        "business_not_found": "Η επιχείρηση δεν βρέθηκε.",
        "membership_not_found": "Δεν είστε μέλος αυτής της επιχείρησης.",
        "discount_not_found": "Η προσφορά δεν βρέθηκε.",
        "error_unexpected": "Παρουσιάστηκε ένα απρόσμενο σφάλμα.",
        "invalid_credentials": "Λάθος email ή κωδικός.",
        "invalid_input": "Συμπληρώστε όλα τα υποχρεωτικά πεδία.",
        "too_many_attempts": "Πάρα πολλές προσπάθειες. Δοκιμάστε ξανά αργότερα.",
        "login_required": "Συνδεθείτε για να συνεχίσετε.",
        "points_awarded": "+{points} πόντοι για {name}!",
        "reward_earned": "{name} κέρδισε δώρο!",
        "default_reward_message": "Κερδίσατε ένα δώρο! Δείξτε το στο προσωπικό για να το παραλάβετε.",
        "not_a_customer_code": "Αυτός δεν είναι κωδικός πελάτη.",
        "unrecognized_code": "Άγνωστος κωδικός.",
        "join_success": "Καλώς ήρθατε",
        "leave_success": "Αποχωρήσατε από αυτή την επιχείρηση.",
        "duplicate_phone": "Αυτός ο αριθμός τηλεφώνου είναι ήδη καταχωρημένος.",
        "gift_won": "Συγχαρητήρια!",
        "profile_saved": "Το προφίλ ενημερώθηκε.",
        "account_deleted": "Ο λογαριασμός σας διαγράφηκε.",
    },
}


def _language_code(language: str | None) -> str:
    language = language or get_language() or qroyal_settings.DEFAULT_LANGUAGE
    return language.split("-")[0].lower()


def translate(key: str, language: str | None = None, **params) -> str:
    """Translate a message key, formatting ``params`` into the text."""
    default = qroyal_settings.DEFAULT_LANGUAGE
    text = CATALOG.get(_language_code(language), {}).get(key)
    if text is None:
        text = CATALOG.get(default, {}).get(key, key)
    if params:
        return text.format(**params)
    return text
