import re
from io import BytesIO

from django.http import HttpResponse
from django.utils import timezone
from docx import Document

from .session import ScoreReport, load_session

DOCX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
SUPPORTED_FORMATS = ('txt', 'docx')

TYPE_LABELS = {
    'multiple_choice': 'Multiple choice',
    'true_false': 'True / False',
    'open_ended': 'Open question',
}

# ---------------------- Utility Functions ----------------------

def _safe_filename(name: str, max_len: int = 180) -> str:
    """Make a string safe for use as a filename."""
    if not name:
        return "Quiz_Results"
    s = str(name).strip()
    s = re.sub(r'\s+', '_', s)
    s = re.sub(r'[\\/:"*?<>|]+', '_', s)
    return s[:max_len] or "Quiz_Results"


def build_result_lines(report: ScoreReport, generated_at) -> list:
    lines = [
        'Quiz Results',
        '-------------------------',
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S %Z')}",
        f"Score: {report.score_display} ({report.percentage}%)",
        '',
    ]

    for result in report.results:
        lines.append(f"Question {result.index + 1} ({TYPE_LABELS.get(result.type, result.type)}): {result.question}")
        if result.type == 'open_ended':
            lines.append(f"   Your answer: {result.user_answer_text or '(no answer)'}")
            lines.append(f"   Ideal answer: {result.correct_answer_text}")
            lines.append("   (Self-check question, not counted in the score.)")
        else:
            verdict = 'correct' if result.is_correct else 'incorrect'
            lines.append(f"   Your answer: {result.user_answer_text} ({verdict})")
            if not result.is_correct:
                lines.append(f"   Correct answer: {result.correct_answer_text}")
        lines.append(f"   Explanation: {result.explanation}")
        lines.append('')
    return lines


# ---------------------- Main Download Function ----------------------

def handle_quiz_download(request):
    """
    Builds the results file of the completed quiz held in the session.
    `?format=docx` returns a Word document, anything else plain text.
    """
    report = load_session(request.session).score()

    now = timezone.localtime()
    filename_base = _safe_filename(f"Quiz_Results_{now.strftime('%Y%m%d_%H%M%S')}")
    lines = build_result_lines(report, now)

    file_format = request.GET.get('format', 'txt').lower()
    if file_format not in SUPPORTED_FORMATS:
        file_format = 'txt'

    if file_format == 'docx':
        buffer = BytesIO()
        doc = Document()
        for line in lines:
            doc.add_paragraph(line)
        doc.save(buffer)
        response = HttpResponse(buffer.getvalue(), content_type=DOCX_CONTENT_TYPE)
    else:
        response = HttpResponse('\n'.join(lines), content_type='text/plain; charset=utf-8')

    response['Content-Disposition'] = f'attachment; filename="{filename_base}.{file_format}"'
    return response
