import os
import time

import jwt
import pytest

# Settings are read at import time and the JWT secret has no default.
TEST_JWT_SECRET = "test-secret-oer-search-must-be-long-enough-32chars"
os.environ.setdefault("JWT_SECRET", TEST_JWT_SECRET)

from oer_search.config import settings  # noqa: E402


def create_token(
    subject="ingest-pipeline",
    scopes=None,
    issuer=None,
    audience=None,
    expired=False,
    secret=None,
):
    if scopes is None:
        scopes = ["materials_write"]

    now = int(time.time())
    iat = now - 3600 if expired else now
    exp = iat - 10 if expired else now + 300

    payload = {
        "iss": issuer or settings.jwt_issuer,
        "aud": audience or settings.jwt_audience,
        "iat": iat,
        "exp": exp,
        "sub": subject,
        "scope": scopes,
    }
    return jwt.encode(
        payload,
        secret or settings.jwt_secret.get_secret_value(),
        algorithm="HS256",
    )


def make_source(material_id=1, **overrides):
    source = {
        "material_id": material_id,
        "title": "Introduction to Machine Learning",
        "description": "Lecture on supervised learning",
        "creation_date": "2019-03-01",
        "retrieved_date": "2019-04-01",
        "type": "video",
        "extension": "mp4",
        "mimetype": "video/mp4",
        "material_url": f"http://videolectures.net/lecture_{material_id}.mp4",
        "website_url": f"http://videolectures.net/lecture_{material_id}/",
        "language": "en",
        "license": {
            "short_name": "by-nc-nd",
            "typed_name": ["by", "nc", "nd"],
            "disclaimer": "The usage of the corresponding material is in all cases "
                          "under the sole responsibility of the user.",
            "url": "https://creativecommons.org/licenses/by-nc-nd/3.0/",
        },
        "provider_id": 3,
        "provider_name": "VideoLectures.NET",
        "provider_url": "http://videolectures.net",
        "contents": [
            {"content_id": 10, "type": "transcription", "extension": "plain",
             "language": "en", "value": "today we talk about learning"},
            {"content_id": 11, "type": "transcription", "extension": "webvtt",
             "language": "en", "value": "WEBVTT\n\n00:00.000 --> 00:02.000\ntoday"},
            {"content_id": 12, "type": "translation", "extension": "plain",
             "language": "sl", "value": "danes govorimo o ucenju"},
        ],
        "wikipedia": [
            {"uri": f"http://en.wikipedia.org/wiki/Concept_{i}",
             "name": f"Concept {i}", "sec_name": f"Concept {i}",
             "lang": "en", "cosine": 0.5, "pagerank": 10.0 - i, "support": 3}
            for i in range(8)
        ],
    }
    source.update(overrides)
    return source


def make_hit(material_id=1, score=12.5, **overrides):
    return {
        "_index": "oer_materials",
        "_id": str(material_id),
        "_score": score,
        "_source": make_source(material_id, **overrides),
    }


def make_search_output(hits, total=None, aggregations=None):
    return {
        "took": 3,
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "hits": hits,
        },
        "aggregations": aggregations or {},
    }


@pytest.fixture
def write_token():
    return create_token()
