from django.contrib import admin
from django.urls import include, path

from complaints.views import HomeView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", HomeView.as_view(), name="home"),
    path("accounts/", include("accounts.urls")),
    path("api/auth/", include("accounts.api_urls")),
    path("api/", include("complaints.api_urls")),
    path("", include("complaints.urls")),
]
