from functools import wraps
import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core.cookies import (
    PREF_QUESTION_COUNT_COOKIE,
    PREF_TEST_TYPE_COOKIE,
    get_quiz_preference_cookie,
    set_quiz_preference_cookie,
)
from core.exceptions import InputValidationError, ServiceError
from materials.services import MaterialService

from .quiz_download_utils import handle_quiz_download
from .services import DEFAULT_QUESTION_COUNT, DEFAULT_TEST_TYPE, QuizService
from .session import QuizSession, discard_session, load_session, save_session

logger = logging.getLogger(__name__)


def _error_response(error: ServiceError) -> JsonResponse:
    return JsonResponse({'message': error.message}, status=error.status_code)


def _server_error_response() -> JsonResponse:
    return JsonResponse({'message': 'Server error'}, status=500)


def handle_service_errors(view):
    """Turn ServiceError into its JSON error payload; anything else becomes a logged 500."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except ServiceError as e:
            logger.warning(f"{view.__name__} failed: {e.status_code} {e.message}")
            return _error_response(e)
        except Exception as e:
            logger.error(f"Unexpected error in {view.__name__}: {e}", exc_info=True)
            return _server_error_response()
    return wrapper


def _read_payload(request) -> dict:
    """JSON body when the client sent JSON, form fields otherwise."""
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body.decode('utf-8') or '{}')
        except (ValueError, UnicodeDecodeError):
            raise InputValidationError('Invalid data format submitted.')
        if not isinstance(data, dict):
            raise InputValidationError('Invalid data format submitted.')
        return data
    return request.POST.dict()


def _start_quiz_response(request, questions, test_type, question_count) -> JsonResponse:
    """Open a new quiz session with the delivered questions and return them."""
    save_session(request.session, QuizSession.start(questions))

    response = JsonResponse(questions, safe=False)
    response['X-Questions-Requested'] = str(question_count)
    response['X-Questions-Delivered'] = str(len(questions))

    # Remember the chosen settings as defaults for next time (consent permitting)
    response = set_quiz_preference_cookie(request, response, PREF_TEST_TYPE_COOKIE, test_type)
    response = set_quiz_preference_cookie(request, response, PREF_QUESTION_COUNT_COOKIE, str(question_count))
    return response


@csrf_exempt
@require_POST
@handle_service_errors
def generate_test(request):
    """
    Generates a test from pasted study text.
    """
    # A new generation request always ends the previous quiz
    discard_session(request.session)

    data = _read_payload(request)
    test_type = QuizService.parse_test_type(data.get('testType'))
    question_count = QuizService.parse_question_count(data.get('questionCount'))
    text = QuizService.validate_source_text(data.get('text'))

    logger.info(f"Test generation request - Text length: {len(text)}, Type: {test_type}, Count: {question_count}")
    questions = QuizService.generate_test(text, test_type, question_count)
    return _start_quiz_response(request, questions, test_type, question_count)


@csrf_exempt
@require_POST
@handle_service_errors
def upload_and_generate(request):
    """
    Generates a test from an uploaded PDF, Word or plain-text document.
    """
    discard_session(request.session)

    if 'file' not in request.FILES:
        return JsonResponse({'message': 'No file uploaded.'}, status=400)

    file = request.FILES['file']
    test_type = QuizService.parse_test_type(request.POST.get('testType'))
    question_count = QuizService.parse_question_count(request.POST.get('questionCount'))
    MaterialService.validate_upload(file)

    logger.info(f"Upload generation request - File: {file.name}, Size: {file.size}, Type: {test_type}, Count: {question_count}")
    with MaterialService.stored_upload(file) as path:
        text = MaterialService.extract_text_from_path(path, file.content_type)
        questions = QuizService.generate_test(text, test_type, question_count)
    return _start_quiz_response(request, questions, test_type, question_count)


# ===============================================
# Quiz-taking flow
# ===============================================

@require_GET
@handle_service_errors
def quiz_state(request):
    """Current progress and the question to show next."""
    quiz = load_session(request.session)
    return JsonResponse(quiz.public_state())


@csrf_exempt
@require_POST
@handle_service_errors
def submit_answer(request):
    quiz = load_session(request.session)
    data = _read_payload(request)
    quiz.submit_answer(data.get('answer'))
    save_session(request.session, quiz)
    return JsonResponse(quiz.public_state())


@csrf_exempt
@require_POST
@handle_service_errors
def skip_question(request):
    quiz = load_session(request.session)
    quiz.skip()
    save_session(request.session, quiz)
    return JsonResponse(quiz.public_state())


@require_GET
@handle_service_errors
def quiz_results(request):
    """Score report for a completed quiz. Open-ended answers are shown but never graded."""
    quiz = load_session(request.session)
    return JsonResponse(quiz.score().to_dict())


@require_GET
@handle_service_errors
def download_results(request):
    """
    Thin wrapper view that delegates all the heavy lifting to the utility file.
    """
    return handle_quiz_download(request)


@csrf_exempt
@require_POST
def restart_quiz(request):
    discard_session(request.session)
    return JsonResponse({'status': 'ok'})


@require_GET
@handle_service_errors
def preferences(request):
    """Default test settings, taken from the preference cookies when present."""
    raw_type = get_quiz_preference_cookie(request, PREF_TEST_TYPE_COOKIE, DEFAULT_TEST_TYPE)
    raw_count = get_quiz_preference_cookie(request, PREF_QUESTION_COUNT_COOKIE, DEFAULT_QUESTION_COUNT)
    try:
        test_type = QuizService.parse_test_type(raw_type)
    except InputValidationError:
        test_type = DEFAULT_TEST_TYPE
    return JsonResponse({
        'testType': test_type,
        'questionCount': QuizService.parse_question_count(raw_count),
    })
