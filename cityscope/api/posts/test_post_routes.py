# cityscope/api/posts/test_post_routes.py
import io
import uuid


def test_feed_requires_token(client):
    response = client.get('/api/posts')
    assert response.status_code == 401
    assert response.get_json()["success"] is False


def test_create_post_multipart_with_image(client, auth_headers, make_user, storage_service, user_repository):
    author = make_user(city="Austin")
    response = client.post('/api/posts', headers=auth_headers(author), data={
        "content": "Great taco spot downtown!",
        "postType": "recommend",
        "city": "Austin",
        "image": (io.BytesIO(b"fake-bytes"), "taco.jpg", "image/jpeg"),
    }, content_type='multipart/form-data')

    body = response.get_json()
    assert response.status_code == 201
    assert body["success"] is True
    assert body["data"]["post"]["image"] == storage_service.uploaded[0]
    assert body["data"]["post"]["author"]["user_id"] == author.user_id
    assert user_repository.get(author.user_id).posts_count == 1


def test_create_post_validation(client, auth_headers, make_user):
    author = make_user()
    headers = auth_headers(author)

    too_long = client.post('/api/posts', headers=headers, data={"content": "x" * 281, "postType": "help"})
    assert too_long.status_code == 400
    assert "content" in too_long.get_json()["details"]

    exact = client.post('/api/posts', headers=headers, data={"content": "x" * 280, "postType": "help"})
    assert exact.status_code == 201

    bad_type = client.post('/api/posts', headers=headers, data={"content": "hi", "postType": "gossip"})
    assert bad_type.status_code == 400
    assert bad_type.get_json()["error"] == "VALIDATION_ERROR"


def test_create_post_status_mapping(client, auth_headers, make_user, user_repository):
    inactive = make_user(is_active=False)
    ghost = make_user()
    user_repository.documents.pop(ghost.user_id)

    assert client.post('/api/posts', headers=auth_headers(inactive),
                       data={"content": "hi", "postType": "help"}).status_code == 403
    assert client.post('/api/posts', headers=auth_headers(ghost),
                       data={"content": "hi", "postType": "help"}).status_code == 404


def test_like_and_dislike_endpoints(client, auth_headers, make_user, make_post):
    author, fan = make_user(), make_user()
    post = make_post(author)
    headers = auth_headers(fan)

    liked = client.post(f'/api/posts/{post.post_id}/like', headers=headers).get_json()
    assert liked["data"]["state"] == "liked"

    disliked = client.post(f'/api/posts/{post.post_id}/dislike', headers=headers).get_json()
    assert disliked["message"] == "Post disliked successfully"
    assert disliked["data"]["post"]["likes_count"] == 0
    assert disliked["data"]["post"]["dislikes_count"] == 1

    undisliked = client.post(f'/api/posts/{post.post_id}/dislike', headers=headers).get_json()
    assert undisliked["data"]["state"] == "undisliked"


def test_like_errors(client, auth_headers, make_user, make_post):
    user = make_user()
    headers = auth_headers(user)
    inactive = make_post(user, is_active=False)

    assert client.post('/api/posts/bad-id/like', headers=headers).status_code == 400
    assert client.post(f'/api/posts/{uuid.uuid4()}/like', headers=headers).status_code == 404
    assert client.post(f'/api/posts/{inactive.post_id}/like', headers=headers).status_code == 404


def test_list_feed_query_validation(client, auth_headers, make_user, make_post):
    user = make_user()
    make_post(user, post_type="event")
    headers = auth_headers(user)

    assert client.get('/api/posts?postType=gossip', headers=headers).status_code == 400
    assert client.get('/api/posts?sortBy=best', headers=headers).status_code == 400
    assert client.get('/api/posts?page=0', headers=headers).status_code == 400

    ok = client.get('/api/posts?postType=event&sortBy=mostLiked&postType=', headers=headers)
    assert ok.status_code == 200
    assert len(ok.get_json()["data"]["posts"]) == 1


def test_home_feed_endpoint(client, auth_headers, make_user, make_post):
    reader = make_user(city="Austin")
    austin = make_post(make_user(city="Austin"))
    make_post(make_user(city="Denver"))

    body = client.get('/api/posts/feed?page=1&limit=5', headers=auth_headers(reader)).get_json()
    assert [p["post_id"] for p in body["data"]["posts"]] == [austin.post_id]
    assert body["data"]["pagination"]["total_posts"] == 1


def test_reply_endpoints(client, auth_headers, make_user, make_post):
    author = make_user()
    post = make_post(author)
    headers = auth_headers(author)

    empty = client.post(f'/api/posts/{post.post_id}/replies', headers=headers, json={"content": "  "})
    assert empty.status_code == 400

    added = client.post(f'/api/posts/{post.post_id}/replies', headers=headers, json={"content": "thanks"})
    assert added.status_code == 201
    reply_id = added.get_json()["data"]["reply_id"]

    removed = client.delete(f'/api/posts/{post.post_id}/replies/{reply_id}', headers=headers)
    assert removed.status_code == 200
    assert removed.get_json()["data"]["post"]["replies"] == []


def test_get_and_delete_post(client, auth_headers, make_user, make_post):
    author, other = make_user(), make_user()
    post = make_post(author)

    assert client.get(f'/api/posts/{post.post_id}', headers=auth_headers(other)).status_code == 200
    assert client.delete(f'/api/posts/{post.post_id}', headers=auth_headers(other)).status_code == 403
    assert client.delete(f'/api/posts/{post.post_id}', headers=auth_headers(author)).status_code == 200
    assert client.get(f'/api/posts/{post.post_id}', headers=auth_headers(author)).status_code == 404
