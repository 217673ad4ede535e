# core/views.py
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .cookies import set_consent_cookie


@csrf_exempt
@require_POST
def accept_cookies(request):
    """Records the user's consent to preference cookies."""
    response = JsonResponse({'status': 'ok'})
    return set_consent_cookie(response)
