# core/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('cookies/accept/', views.accept_cookies, name='accept_cookies'),
]
