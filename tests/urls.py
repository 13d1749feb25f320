from django.urls import include, path

urlpatterns = [
    path("", include("qroyal.urls")),
]
