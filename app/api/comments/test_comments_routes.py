# app/api/comments/test_comments_routes.py

from app.conftest import auth_headers


def _create_post(client):
    response = client.post('/api/posts', json={"content": "Hello world"}, headers=auth_headers("token-alice"))
    return response.get_json()["id"]


def test_add_comment(client, db):
    post_id = _create_post(client)

    response = client.post(f'/api/posts/{post_id}/comments', json={"content": "  Nice post  "},
                           headers=auth_headers("token-alice"))
    assert response.status_code == 201
    comment = response.get_json()
    assert comment["content"] == "Nice post"
    assert comment["authorId"] == "alice"
    assert comment["authorName"] == "Alice"
    assert comment["authorAvatar"] == "https://example.com/alice.png"
    assert isinstance(comment["createdAt"], int)

    stored = (db.collection('posts').document(post_id)
              .collection('comments').document(comment["id"]).get().to_dict())
    assert stored["content"] == "Nice post"


def test_comment_author_uses_email_local_part(client):
    post_id = _create_post(client)
    response = client.post(f'/api/posts/{post_id}/comments', json={"content": "hi"},
                           headers=auth_headers("token-carol"))
    assert response.get_json()["authorName"] == "carol"
    assert response.get_json()["authorAvatar"] is None


def test_list_comments_oldest_first(client, db):
    post_id = _create_post(client)
    comments_ref = db.collection('posts').document(post_id).collection('comments')
    for doc_id, created_at in (("c-late", 3000), ("c-early", 1000), ("c-mid", 2000)):
        comments_ref.document(doc_id).set({
            "content": doc_id,
            "authorId": "bob",
            "authorName": "bob",
            "authorAvatar": None,
            "createdAt": created_at,
        })

    response = client.get(f'/api/posts/{post_id}/comments')
    assert response.status_code == 200
    assert [c["id"] for c in response.get_json()] == ["c-early", "c-mid", "c-late"]


def test_add_comment_errors(client):
    post_id = _create_post(client)

    response = client.post(f'/api/posts/{post_id}/comments', json={"content": "hi"})
    assert response.status_code == 401
    assert response.get_json() == {"error": "Please login to comment."}

    response = client.post(f'/api/posts/{post_id}/comments', json={"content": "   "},
                           headers=auth_headers("token-alice"))
    assert response.status_code == 400

    response = client.post('/api/posts/missing/comments', json={"content": "hi"},
                           headers=auth_headers("token-alice"))
    assert response.status_code == 404
