"""
URL configuration for vetmart project.
"""

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),

    # API endpoints
    path("api/", include("vetmartproject.api_urls")),
]
