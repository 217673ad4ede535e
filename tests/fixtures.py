"""
Sample data shared by the test modules.
"""
import json
from typing import Dict, List
from unittest.mock import Mock


STUDY_TEXT = (
    "Photosynthesis is the process by which green plants use sunlight, water and "
    "carbon dioxide to produce glucose and oxygen. It takes place in the chloroplasts, "
    "which contain the green pigment chlorophyll."
)


class QuizFixtures:
    """Centralized question records and LLM replies."""

    @staticmethod
    def multiple_choice(correct_index: int = 1, **overrides) -> Dict:
        record = {
            "type": "multiple_choice",
            "question": "Where does photosynthesis take place?",
            "options": ["Mitochondria", "Chloroplasts", "Nucleus"],
            "correctAnswerIndex": correct_index,
            "explanation": "The text says it takes place in the chloroplasts.",
        }
        record.update(overrides)
        return record

    @staticmethod
    def true_false(correct: bool = True, **overrides) -> Dict:
        record = {
            "type": "true_false",
            "question": "Photosynthesis produces oxygen.",
            "correctAnswer": correct,
            "explanation": "Glucose and oxygen are the products.",
        }
        record.update(overrides)
        return record

    @staticmethod
    def open_ended(**overrides) -> Dict:
        record = {
            "type": "open_ended",
            "question": "What does a plant need for photosynthesis?",
            "idealAnswer": "Sunlight, water and carbon dioxide.",
            "explanation": "These three inputs are listed in the text.",
        }
        record.update(overrides)
        return record

    @staticmethod
    def mixed_questions() -> List[Dict]:
        return [
            QuizFixtures.multiple_choice(),
            QuizFixtures.true_false(),
            QuizFixtures.open_ended(),
        ]

    @staticmethod
    def llm_reply(questions: List[Dict]) -> str:
        return json.dumps({"questions": questions})

    @staticmethod
    def chat_completion(content) -> Mock:
        """Mimic the shape of an openai ChatCompletion object."""
        message = Mock()
        message.content = content
        choice = Mock()
        choice.message = message
        completion = Mock()
        completion.choices = [choice]
        return completion
