"""Pydantic models for jetwatch configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProbeConfig(BaseModel):
    """Where and how long to probe dependency status endpoints."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "http://localhost:5000"
    timeout: float = 5.0


class ServiceEntry(BaseModel):
    """A named external dependency and its status endpoint."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    description: str = ""


class FallbackRule(BaseModel):
    """Local signal that marks a dependency as connected when its probe fails.

    With ``expect`` unset, any non-empty value of ``signal`` counts.
    """

    model_config = ConfigDict(frozen=True)

    signal: str
    expect: str | None = None
    message: str = ""


class TabEntry(BaseModel):
    """A UI tab: its components and the dependencies it needs."""

    model_config = ConfigDict(frozen=True)

    components: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    visible: bool = True
    interactive: bool = True


class ChatConfig(BaseModel):
    """Tabs that get the chatbot check, and tabs that actually render it."""

    model_config = ConfigDict(frozen=True)

    audited_tabs: tuple[str, ...] = ("Explore", "Chat")
    enabled_tabs: tuple[str, ...] = ("Explore", "Itineraries", "Chat")


class AppIdentity(BaseModel):
    """Top-level identity metadata."""

    model_config = ConfigDict(frozen=True)

    name: str = "JetAI"
    version: str = "0.1.0"


def _default_services() -> dict[str, ServiceEntry]:
    return {
        "Gemini AI": ServiceEntry(endpoint="/api/gemini/status", description="Gemini chat and itinerary generation"),
        "Claude AI": ServiceEntry(endpoint="/api/anthropic/status", description="Claude assistant"),
        "OpenAI": ServiceEntry(endpoint="/api/openai/status", description="OpenAI completions"),
        "Google Maps": ServiceEntry(endpoint="/api/google/maps/status", description="Maps and places"),
        "Google Vision": ServiceEntry(endpoint="/api/google/vision/status", description="Image analysis"),
        "Google Translate": ServiceEntry(endpoint="/api/google/translate/status", description="Translation"),
        "Google TTS": ServiceEntry(endpoint="/api/google/tts/status", description="Text-to-speech"),
        "Firebase": ServiceEntry(endpoint="/api/firebase/status", description="Auth and user data"),
        "Amadeus": ServiceEntry(endpoint="/api/amadeus/status", description="Flight search"),
        "RapidAPI": ServiceEntry(endpoint="/api/rapidapi/status", description="Hotel and activity search"),
        "Stripe": ServiceEntry(endpoint="/api/stripe/status", description="Payments"),
        "TripAdvisor": ServiceEntry(endpoint="/api/tripadvisor/status", description="Reviews and attractions"),
    }


def _default_fallbacks() -> dict[str, FallbackRule]:
    ai_activity = FallbackRule(signal="recent_ai_responses", message="Recent AI activity detected")
    return {
        "Firebase": FallbackRule(
            signal="firebase_initialized",
            expect="true",
            message="Firebase detected in local storage",
        ),
        "Gemini AI": ai_activity,
        "Claude AI": ai_activity,
        "OpenAI": ai_activity,
    }


def _default_tabs() -> dict[str, TabEntry]:
    return {
        "Explore": TabEntry(
            components=("SearchBox", "DestinationGrid", "FilterPanel", "RecommendationCarousel"),
            dependencies=("Google Maps", "Gemini AI", "TripAdvisor", "Firebase"),
        ),
        "Itineraries": TabEntry(
            components=("ItineraryList", "FilterPanel", "SortDropdown"),
            dependencies=("Google Maps", "Gemini AI", "Amadeus", "Firebase"),
        ),
        "Bookings": TabEntry(
            components=("BookingList", "CalendarView", "StatusFilter"),
            dependencies=("Amadeus", "RapidAPI", "Firebase"),
        ),
        "Profile": TabEntry(
            components=("UserInfo", "PreferencePanel", "ActivityHistory"),
            dependencies=("Firebase", "Stripe"),
        ),
        "Settings": TabEntry(
            components=("GeneralSettings", "PrivacySettings", "NotificationSettings", "LanguageSelector"),
            dependencies=("Firebase",),
        ),
    }


class WatchConfig(BaseModel):
    """Root configuration model for .jetwatch.yaml."""

    model_config = ConfigDict(frozen=True)

    app: AppIdentity = Field(default_factory=AppIdentity)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    services: dict[str, ServiceEntry] = Field(default_factory=_default_services)
    fallbacks: dict[str, FallbackRule] = Field(default_factory=_default_fallbacks)
    tabs: dict[str, TabEntry] = Field(default_factory=_default_tabs)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    signals_file: str = ""  # empty = no local signals
