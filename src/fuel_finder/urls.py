from django.urls import path

from fuel_finder import views

urlpatterns = [
    path("api/v1/health", views.health_view, name="health"),
    path("api/v1/stations", views.nearby_stations_view, name="nearby-stations"),
    path("api/v1/location", views.location_view, name="location"),
]
