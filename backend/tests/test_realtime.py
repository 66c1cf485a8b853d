def post_crime(client, crime_type="Theft", address="1 Main St", latitude=51.5, longitude=-0.1):
    return client.post(
        "/api/crimes",
        json={
            "type": crime_type,
            "location": "Downtown",
            "address": address,
            "latitude": latitude,
            "longitude": longitude,
        },
    )


def test_radius_alerts_over_websocket(client):
    post_crime(client, crime_type="Robbery", address="A", latitude=51.5000, longitude=-0.1000)
    post_crime(client, crime_type="Theft", address="B", latitude=51.6000, longitude=-0.1000)

    with client.websocket_connect("/api/realtime/alerts") as websocket:
        websocket.send_json({"lat": 51.5001, "lng": -0.1000})
        message = websocket.receive_json()

    assert message["type"] == "proximity_alerts"
    assert [alert["address"] for alert in message["data"]] == ["A"]
    assert message["data"][0]["severity"] == "red"


def test_custom_radius_over_websocket(client):
    post_crime(client, address="B", latitude=51.6000, longitude=-0.1000)

    with client.websocket_connect("/api/realtime/alerts") as websocket:
        websocket.send_json({"lat": 51.5, "lng": -0.1, "radius_m": 20000})
        message = websocket.receive_json()

    assert len(message["data"]) == 1


def test_bad_position_message(client):
    with client.websocket_connect("/api/realtime/alerts") as websocket:
        websocket.send_json({"latitude": 1})
        message = websocket.receive_json()

    assert message["type"] == "error"


def test_new_report_is_broadcast(client):
    with client.websocket_connect("/api/realtime/alerts") as websocket:
        # A first round trip makes sure the connection is registered
        websocket.send_json({"lat": 0.0, "lng": 0.0})
        assert websocket.receive_json()["type"] == "proximity_alerts"

        response = post_crime(client, crime_type="Murder", address="C")
        message = websocket.receive_json()

    assert message["type"] == "crime_reported"
    assert message["data"]["id"] == response.json()["id"]
    assert message["data"]["severity"] == "red"


def test_new_report_alerts_clients_within_radius(client):
    with client.websocket_connect("/api/realtime/alerts") as websocket:
        websocket.send_json({"lat": 51.5001, "lng": -0.1000})
        assert websocket.receive_json()["data"] == []

        response = post_crime(client, crime_type="Robbery", address="D", latitude=51.5000, longitude=-0.1000)
        announcement = websocket.receive_json()
        alert = websocket.receive_json()

    assert announcement["type"] == "crime_reported"
    assert alert["type"] == "new_crime_nearby"
    assert alert["data"]["crime_id"] == response.json()["id"]
    assert alert["data"]["severity"] == "red"
    assert alert["data"]["address"] == "D"
    assert 0 < alert["data"]["distance_m"] < 20


def test_new_report_outside_radius_is_only_announced(client):
    with client.websocket_connect("/api/realtime/alerts") as websocket:
        websocket.send_json({"lat": 51.6000, "lng": -0.1000, "radius_m": 1000})
        assert websocket.receive_json()["data"] == []

        post_crime(client, address="E", latitude=51.5000, longitude=-0.1000)
        assert websocket.receive_json()["type"] == "crime_reported"

        # The next message answers this position update; no nearby alert was queued
        websocket.send_json({"lat": 51.6000, "lng": -0.1000})
        message = websocket.receive_json()

    assert message["type"] == "proximity_alerts"
    assert message["data"] == []
