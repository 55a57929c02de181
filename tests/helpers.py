import json

import httpx

from tutor_sessions.database import models as db_models
from tutor_sessions.services.security import JWTHandler


def auth_headers_for_user(user: db_models.Profiles, remember_me: bool = False) -> dict:
    """Creates a JWT token for the given user and returns auth headers."""
    token, _ = JWTHandler.create_access_token(subject=user.email, remember_me=remember_me)
    return {"Authorization": f"Bearer {token}"}


class RecordingTransport:
    """An httpx.MockTransport handler that records requests and replays canned answers."""
    def __init__(self, responses: list[httpx.Response]):
        self.requests: list[httpx.Request] = []
        self.responses = responses

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # The last answer repeats once the list runs out.
        return self.responses[min(len(self.requests), len(self.responses)) - 1]

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) if r.content else {} for r in self.requests]
