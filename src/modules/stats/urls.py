from django.urls import path

from modules.stats.views import BoutiqueStatisticsView, GlobalStatisticsView

urlpatterns = [
    path("stats/boutique/", BoutiqueStatisticsView.as_view(), name="stats-boutique"),
    path("stats/global/", GlobalStatisticsView.as_view(), name="stats-global"),
]
