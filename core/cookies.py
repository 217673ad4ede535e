from django.http import HttpResponse


# --- CONSTANTS ---
CONSENT_COOKIE_NAME = 'user_consent'
CONSENT_ACCEPTED_VALUE = 'accepted'

PREF_TEST_TYPE_COOKIE = 'pref_test_type'
PREF_QUESTION_COUNT_COOKIE = 'pref_question_count'


def has_consent(request) -> bool:
    """Checks if the user has accepted non-essential cookies."""
    # Note: Only 'Strictly Necessary' cookies (like sessionid) are exempt from this check.
    return request.COOKIES.get(CONSENT_COOKIE_NAME) == CONSENT_ACCEPTED_VALUE


def set_consent_cookie(response: HttpResponse) -> HttpResponse:
    """Sets the primary consent cookie after user accepts (Server-Side)."""
    response.set_cookie(
        key=CONSENT_COOKIE_NAME,
        value=CONSENT_ACCEPTED_VALUE,
        max_age=3600 * 24 * 365, # 1 Year expiration for consent
        httponly=True,           # Prevent client-side JS access
        samesite='Lax'
    )
    return response


# ===============================================
# QUIZ APP COOKIE: Preferred test type and size
# ===============================================

def set_quiz_preference_cookie(request, response: HttpResponse, key: str, value: str) -> HttpResponse:
    """Stores a quiz preference only if user has consented."""
    if has_consent(request):
        response.set_cookie(key, value, max_age=3600 * 24 * 30, samesite='Lax')
    return response


def get_quiz_preference_cookie(request, key: str, default: str | int) -> str | int:
    """Reads a quiz preference cookie."""
    return request.COOKIES.get(key, default)
