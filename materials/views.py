# materials/views.py
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
import logging

from core.exceptions import ServiceError
from .services import MaterialService

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def ajax_extract_text(request):
    """
    An AJAX endpoint to preview the text extracted from an uploaded file.
    """
    if 'file' not in request.FILES:
        return JsonResponse({'message': 'No file uploaded.'}, status=400)

    file = request.FILES['file']

    try:
        extracted_text = MaterialService.extract_text_from_upload(file)
        return JsonResponse({'text': extracted_text})
    except ServiceError as e:
        return JsonResponse({'message': e.message}, status=e.status_code)
    except Exception as e:
        logger.error(f"Text extraction error: {e}", exc_info=True)
        return JsonResponse({'message': 'Server error'}, status=500)
