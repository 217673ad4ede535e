# quizgen/urls.py
from django.urls import include, path

urlpatterns = [
    path('api/', include('quiz.urls')),
    path('api/', include('core.urls')),
    path('api/materials/', include('materials.urls')),
]
