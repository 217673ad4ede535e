# materials/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('extract-text/', views.ajax_extract_text, name='ajax_extract_text'),
]
