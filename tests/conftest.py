"""
Shared fixtures for API tests.

The application is built with ``create_app`` and run without its lifespan:
repositories and external clients are replaced through
``app.dependency_overrides`` with the in-memory doubles below, so no
MongoDB server or network access is needed.
"""

import pytest
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

from bson import ObjectId
from fastapi.testclient import TestClient

from fashion_api.config import Settings
from fashion_api.dependencies import (
    get_photo_client,
    get_style_repository,
    get_user_repository,
    get_weather_client,
)
from fashion_api.exceptions import CityNotFoundError, UserAlreadyExistsError
from fashion_api.main import create_app
from fashion_api.models.auth import Role, UserDB
from fashion_api.models.explore import Photo, PhotoSearchResult, WeatherObservation
from fashion_api.models.style import Style
from fashion_api.repositories.style_repo import parse_style_id
from fashion_api.services.auth_service import AuthService


TEST_SECRET_KEY = "test-secret-key-for-fashion-forecast-0123456789"


# ============================================================================
# TEST DOUBLES
# ============================================================================


class InMemoryStyleRepository:
    """Style repository keeping styles in insertion order."""

    def __init__(self):
        self.styles: "OrderedDict[str, str]" = OrderedDict()

    def list_styles(self) -> List[Style]:
        return [Style(id=style_id, name=name) for style_id, name in self.styles.items()]

    def get_style(self, style_id: str) -> Optional[Style]:
        key = str(parse_style_id(style_id))
        if key not in self.styles:
            return None
        return Style(id=key, name=self.styles[key])

    def add_style(self, name: str) -> Style:
        style_id = str(ObjectId())
        self.styles[style_id] = name
        return Style(id=style_id, name=name)

    def update_style(self, style_id: str, name: str) -> bool:
        key = str(parse_style_id(style_id))
        if key not in self.styles:
            return False
        self.styles[key] = name
        return True

    def delete_style(self, style_id: str) -> bool:
        key = str(parse_style_id(style_id))
        return self.styles.pop(key, None) is not None


class InMemoryUserRepository:
    """User repository backed by a dict."""

    def __init__(self):
        self.users: Dict[str, UserDB] = {}

    def ensure_indexes(self) -> None:
        pass

    def create_user(self, username: str, password_hash: str, role: Role = Role.USER) -> UserDB:
        if self.get_user_by_username(username):
            raise UserAlreadyExistsError(username)
        user = UserDB(id=str(ObjectId()), username=username, password_hash=password_hash, role=role)
        self.users[user.id] = user
        return user

    def get_user_by_id(self, user_id: str) -> Optional[UserDB]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[UserDB]:
        for user in self.users.values():
            if user.username == username:
                return user
        return None


class FakeWeatherClient:
    """Weather client returning a fixed observation."""

    def __init__(self, description: str = "light rain"):
        self.description = description
        self.known_cities = {"toronto": "Toronto", "paris": "Paris"}
        self.error: Optional[Exception] = None
        self.calls: List[str] = []

    async def get_current_weather(self, city: str) -> WeatherObservation:
        self.calls.append(city)
        if self.error is not None:
            raise self.error
        if city.lower() not in self.known_cities:
            raise CityNotFoundError(city)
        return WeatherObservation(
            city_name=self.known_cities[city.lower()],
            description=self.description,
            icon_code="10d",
            temperature=12.5,
        )


class FakePhotoClient:
    """Photo client recording every keyword list it is asked for."""

    def __init__(self):
        self.searches: List[List[str]] = []
        self.error: Optional[Exception] = None

    async def search(self, keywords: Sequence[str], per_page: Optional[int] = None) -> PhotoSearchResult:
        self.searches.append(list(keywords))
        if self.error is not None:
            raise self.error
        query = ", ".join(keywords)
        return PhotoSearchResult(
            query=query,
            total_results=1,
            photos=[
                Photo(
                    id=len(self.searches),
                    url=f"https://www.pexels.com/photo/{len(self.searches)}/",
                    photographer="Test Photographer",
                    alt=query,
                    image_url=f"https://images.pexels.com/photos/{len(self.searches)}/medium.jpeg",
                )
            ],
        )


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings suitable for tests: fast hashing, no rate limiting."""
    return Settings(
        environment="development",
        jwt_secret_key=TEST_SECRET_KEY,
        password_bcrypt_rounds=4,
        rate_limit_enabled=False,
        log_format="text",
        weather_api_key="test-weather-key",
        pexels_api_key="test-pexels-key",
    )


@pytest.fixture
def style_repo() -> InMemoryStyleRepository:
    return InMemoryStyleRepository()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def weather_client() -> FakeWeatherClient:
    return FakeWeatherClient()


@pytest.fixture
def photo_client() -> FakePhotoClient:
    return FakePhotoClient()


@pytest.fixture
def auth_service(user_repo, test_settings) -> AuthService:
    return AuthService(user_repo, test_settings)


@pytest.fixture
def app(test_settings, style_repo, user_repo, weather_client, photo_client):
    """Application wired to the in-memory doubles."""
    application = create_app(test_settings)
    application.dependency_overrides[get_style_repository] = lambda: style_repo
    application.dependency_overrides[get_user_repository] = lambda: user_repo
    application.dependency_overrides[get_weather_client] = lambda: weather_client
    application.dependency_overrides[get_photo_client] = lambda: photo_client
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Test client that reports redirects instead of following them."""
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def admin_user(auth_service) -> UserDB:
    return auth_service.register_user("admin", "AdminPassword123", Role.ADMIN)


@pytest.fixture
def regular_user(auth_service) -> UserDB:
    return auth_service.register_user("visitor", "VisitorPassword123", Role.USER)


@pytest.fixture
def admin_headers(auth_service, admin_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {auth_service.create_access_token(admin_user)}"}


@pytest.fixture
def user_headers(auth_service, regular_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {auth_service.create_access_token(regular_user)}"}
