from rest_framework.routers import SimpleRouter
from .views import CauseViewSet

router = SimpleRouter()
router.register(r"", CauseViewSet, basename="cause")

urlpatterns = router.urls
