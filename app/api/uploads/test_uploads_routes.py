# app/api/uploads/test_uploads_routes.py

import io

from app.conftest import auth_headers


def test_upload_image(client, bucket):
    response = client.post(
        '/api/uploads/images',
        data={"file": (io.BytesIO(b"\x89PNG..."), "my cat.png", "image/png")},
        headers=auth_headers("token-alice"),
        content_type="multipart/form-data",
    )
    assert response.status_code == 201
    image_url = response.get_json()["imageUrl"]
    assert image_url.startswith("https://storage.googleapis.com/test-bucket/posts/alice/")
    assert image_url.endswith("_my_cat.png")

    path = bucket.blob.call_args.args[0]
    assert path.startswith("posts/alice/")


def test_upload_image_rejects_non_images(client, bucket):
    response = client.post(
        '/api/uploads/images',
        data={"file": (io.BytesIO(b"text"), "notes.txt", "text/plain")},
        headers=auth_headers("token-alice"),
        content_type="multipart/form-data",
    )
    assert response.status_code == 400
    bucket.blob.assert_not_called()


def test_upload_image_requires_file_and_token(client):
    assert client.post('/api/uploads/images', headers=auth_headers("token-alice")).status_code == 400
    assert client.post('/api/uploads/images').status_code == 401


def test_upload_url(client, bucket):
    response = client.post('/api/uploads/url', json={"filename": "cat.jpg", "contentType": "image/jpeg"},
                           headers=auth_headers("token-alice"))
    assert response.status_code == 200
    body = response.get_json()
    assert body["filePath"].startswith("posts/alice/")
    assert body["filePath"].endswith(".jpg")
    assert "uploadUrl" in body

    assert client.post('/api/uploads/url', json={"filename": "cat.jpg"},
                       headers=auth_headers("token-alice")).status_code == 400


def test_finalize_upload(client):
    response = client.post('/api/uploads/finalize', json={"filePath": "posts/alice/abc.jpg"},
                           headers=auth_headers("token-alice"))
    assert response.status_code == 200
    assert response.get_json() == {"imageUrl": "https://storage.googleapis.com/test-bucket/posts/alice/abc.jpg"}


def test_finalize_upload_rejects_foreign_paths(client):
    for path in ("posts/bob/abc.jpg", "posts/alice/../bob/abc.jpg", "other/abc.jpg"):
        response = client.post('/api/uploads/finalize', json={"filePath": path},
                               headers=auth_headers("token-alice"))
        assert response.status_code == 403


def test_finalize_upload_missing_object(client, bucket):
    def missing_blob(path):
        blob = bucket.blob.return_value
        blob.exists.return_value = False
        return blob

    bucket.blob.side_effect = missing_blob
    response = client.post('/api/uploads/finalize', json={"filePath": "posts/alice/gone.jpg"},
                           headers=auth_headers("token-alice"))
    assert response.status_code == 404
