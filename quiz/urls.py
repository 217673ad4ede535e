# quiz/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('generate-test/', views.generate_test, name='generate_test'),
    path('upload-and-generate/', views.upload_and_generate, name='upload_and_generate'),

    path('quiz/', views.quiz_state, name='quiz_state'),
    path('quiz/answer/', views.submit_answer, name='submit_answer'),
    path('quiz/skip/', views.skip_question, name='skip_question'),
    path('quiz/results/', views.quiz_results, name='quiz_results'),
    path('quiz/results/download/', views.download_results, name='download_results'),
    path('quiz/restart/', views.restart_quiz, name='restart_quiz'),

    path('preferences/', views.preferences, name='quiz_preferences'),
]
