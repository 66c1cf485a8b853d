from unittest.mock import MagicMock

import pytest

from streetsafety.client import CrimeFeedCache, CrimeFeedClient
from streetsafety.core.exceptions import AuthError, NotFoundError, ValidationError


def response(status_code=200, json_data=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data
    resp.text = str(json_data)
    resp.url = "http://test/api"
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return CrimeFeedClient(base_url="http://test", session=session)


CRIME = {"id": "c1", "type": "Theft", "upvotes": 0, "upvotedBy": []}


def test_cache_lifecycle():
    cache = CrimeFeedCache()
    assert cache.get() is None

    cache.set([CRIME])
    assert cache.is_populated()
    assert cache.get() == [CRIME]

    cache.invalidate()
    assert not cache.is_populated()


def test_feed_is_fetched_once(client, session):
    session.request.return_value = response(json_data=[CRIME])

    assert client.list_crimes() == [CRIME]
    assert client.list_crimes() == [CRIME]

    assert session.request.call_count == 1
    method, url = session.request.call_args.args
    assert (method, url) == ("GET", "http://test/api/crimes")


def test_refresh_bypasses_cache(client, session):
    session.request.return_value = response(json_data=[CRIME])
    client.list_crimes()
    client.list_crimes(refresh=True)
    assert session.request.call_count == 2


def test_vote_invalidates_cache(client, session):
    session.request.side_effect = [
        response(json_data=[CRIME]),
        response(json_data={**CRIME, "upvotes": 1, "upvotedBy": ["a@x.com"]}),
    ]
    client.list_crimes()

    updated = client.upvote("c1", user_email="a@x.com")

    assert updated["upvotes"] == 1
    assert not client.cache.is_populated()
    _, kwargs = session.request.call_args
    assert kwargs["json"] == {"userEmail": "a@x.com"}


def test_repeat_vote_unwraps_crime(client, session):
    session.request.return_value = response(
        json_data={"message": "You have already downvoted this crime", "crime": CRIME}
    )
    assert client.downvote("c1", user_email="a@x.com") == CRIME


def test_submit_invalidates_cache_even_on_error(client, session):
    session.request.side_effect = [
        response(json_data=[CRIME]),
        response(status_code=400, json_data={"detail": "'address' is required"}),
    ]
    client.list_crimes()

    with pytest.raises(ValidationError):
        client.submit_crime("Theft", "Downtown", "")

    assert not client.cache.is_populated()


def test_login_remembers_voter(client, session):
    session.request.side_effect = [
        response(json_data={"message": "Login successful", "userEmail": "a@x.com"}),
        response(json_data=CRIME),
    ]

    assert client.login("a@x.com", "pw") == "a@x.com"
    client.upvote("c1")

    _, kwargs = session.request.call_args
    assert kwargs["json"] == {"userEmail": "a@x.com"}


def test_vote_requires_login(client, session):
    with pytest.raises(AuthError):
        client.upvote("c1")
    session.request.assert_not_called()


def test_error_mapping(client, session):
    session.request.return_value = response(status_code=404, json_data={"detail": "Crime not found"})
    with pytest.raises(NotFoundError):
        client.upvote("missing", user_email="a@x.com")

    session.request.return_value = response(status_code=401, json_data={"detail": "Invalid credentials"})
    with pytest.raises(AuthError):
        client.login("a@x.com", "bad")


@pytest.mark.parametrize("status_code", [400, 422])
def test_rejected_submission_raises_validation_error(client, session, status_code):
    session.request.return_value = response(
        status_code=status_code, json_data={"detail": "Invalid 'address': Field required"}
    )

    with pytest.raises(ValidationError) as excinfo:
        client.submit_crime("Theft", "Baker Street", "")

    assert "address" in str(excinfo.value)


def test_nearby_params(client, session):
    session.request.return_value = response(json_data={"policy": "radius", "alerts": []})

    client.nearby(51.5, -0.1, policy="radius", radius_m=250)

    _, kwargs = session.request.call_args
    assert kwargs["params"] == {"lat": 51.5, "lng": -0.1, "policy": "radius", "radius_m": 250}
