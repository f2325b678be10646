from django.urls import include, path

urlpatterns = [
    path("", include("fuel_finder.urls")),
]
