PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def skip_greeting(ws):
    """Consume the two frames every new connection gets."""
    assert ws.receive_json()["type"] == "scheduled-rooms"
    assert ws.receive_json()["type"] == "stickers"


def join(ws, room, name):
    ws.send_json({"action": "join-room", "data": {"room": room, "name": name}})


def test_connect_sends_boards_to_new_client(client):
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "scheduled-rooms", "data": []}
        assert ws.receive_json() == {"type": "stickers", "data": []}


def test_lobby_scenario(client):
    with client.websocket_connect("/ws") as alice:
        skip_greeting(alice)
        join(alice, "lobby", "Alice")
        assert alice.receive_json() == {"type": "chat-history", "data": []}
        notice = alice.receive_json()
        assert notice["type"] == "message"
        assert notice["data"]["type"] == "system"
        assert notice["data"]["text"] == "Alice joined the room"
        assert alice.receive_json() == {"type": "user-count", "data": 1}

        with client.websocket_connect("/ws") as bob:
            skip_greeting(bob)
            join(bob, "lobby", "Bob")
            history = bob.receive_json()
            assert history["type"] == "chat-history"
            assert [m["text"] for m in history["data"]] == ["Alice joined the room"]
            for ws in (bob, alice):
                assert ws.receive_json()["data"]["text"] == "Bob joined the room"
                assert ws.receive_json() == {"type": "user-count", "data": 2}

            alice.send_json({"action": "send-message", "data": {"text": "hi"}})
            for ws in (alice, bob):
                frame = ws.receive_json()
                assert frame["type"] == "message"
                assert frame["data"]["type"] == "user"
                assert frame["data"]["name"] == "Alice"
                assert frame["data"]["text"] == "hi"

            assert client.get("/rooms").json() == {
                "rooms": [{"name": "lobby", "memberCount": 2, "messageCount": 3}]
            }

        left = alice.receive_json()
        assert left["type"] == "message"
        assert left["data"]["text"] == "Bob left the room"
        assert alice.receive_json() == {"type": "user-count", "data": 1}

    assert client.get("/rooms").json() == {"rooms": []}


def test_rejoining_emptied_room_starts_fresh(client):
    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)
        join(ws, "lobby", "Alice")
        ws.send_json({"action": "send-message", "data": {"text": "remember me"}})

    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)
        join(ws, "lobby", "Bob")
        assert ws.receive_json() == {"type": "chat-history", "data": []}


def test_send_before_join_is_ignored(client):
    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)
        ws.send_json({"action": "send-message", "data": {"text": "hello?"}})
        ws.send_json({"action": "remove-scheduled", "data": {"id": "nope"}})
        # The next frame is the reply to this bad action, so nothing came before it
        ws.send_json({"action": "dance"})
        assert ws.receive_json() == {"type": "error", "data": {"message": "Unknown action: dance"}}

    assert client.get("/rooms").json() == {"rooms": []}


def test_second_join_is_rejected(client):
    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)
        join(ws, "lobby", "Alice")
        for _ in range(3):
            ws.receive_json()

        join(ws, "kitchen", "Alice")
        frame = ws.receive_json()
        assert frame["type"] == "error"

        rooms = client.get("/rooms").json()["rooms"]
        assert rooms == [{"name": "lobby", "memberCount": 1, "messageCount": 1}]


def test_join_with_missing_name_is_rejected(client):
    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)
        ws.send_json({"action": "join-room", "data": {"room": "lobby"}})
        assert ws.receive_json()["type"] == "error"
        ws.send_json({"action": "join-room", "data": {"room": "lobby", "name": "  "}})
        assert ws.receive_json()["type"] == "error"

    assert client.get("/rooms").json() == {"rooms": []}


def test_invalid_json_gets_error(client):
    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)
        ws.send_text("{not json")
        assert ws.receive_json() == {"type": "error", "data": {"message": "Invalid JSON"}}
        ws.send_text("[1, 2]")
        assert ws.receive_json()["type"] == "error"


def test_bad_media_type_gets_error(client):
    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)
        join(ws, "lobby", "Alice")
        for _ in range(3):
            ws.receive_json()
        ws.send_json({"action": "send-message", "data": {"fileUrl": "/uploads/a.exe", "mediaType": "binary"}})
        assert ws.receive_json()["type"] == "error"


def test_scheduled_rooms_are_broadcast_globally(client):
    with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
        skip_greeting(a)
        skip_greeting(b)
        join(b, "elsewhere", "Bob")
        for _ in range(3):
            b.receive_json()

        a.send_json({"action": "publish-room", "data": {"room": "Standup", "time": "10:00"}})
        for ws in (a, b):
            frame = ws.receive_json()
            assert frame["type"] == "scheduled-rooms"
            assert [(s["room"], s["time"]) for s in frame["data"]] == [("Standup", "10:00")]
        entry_id = frame["data"][0]["id"]

        a.send_json({"action": "publish-room", "data": {"room": "Standup"}})
        assert a.receive_json()["type"] == "error"

        b.send_json({"action": "remove-scheduled", "data": {"id": entry_id}})
        for ws in (a, b):
            assert ws.receive_json() == {"type": "scheduled-rooms", "data": []}


def test_sticker_upload_and_removal_reach_every_client(client):
    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)

        resp = client.post("/upload-sticker", files={"sticker": ("s.png", PNG_BYTES, "image/png")})
        assert resp.status_code == 200
        sticker = resp.json()
        assert ws.receive_json() == {"type": "stickers", "data": [sticker]}
        assert client.get(sticker["url"]).content == PNG_BYTES

        ws.send_json({"action": "remove-sticker", "data": {"id": "unknown"}})
        ws.send_json({"action": "remove-sticker", "data": {"id": sticker["id"]}})
        assert ws.receive_json() == {"type": "stickers", "data": []}


def test_rejected_sticker_is_not_broadcast(client):
    with client.websocket_connect("/ws") as ws:
        skip_greeting(ws)

        resp = client.post("/upload-sticker", files={"sticker": ("doc.txt", b"hello", "text/plain")})
        assert resp.status_code == 415

        ws.send_json({"action": "dance"})
        assert ws.receive_json()["type"] == "error"

    assert client.get("/health").json()["stickers"] == 0
