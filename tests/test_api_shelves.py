def _add_book(client, title='Dune', external_id='OL1W'):
    response = client.post('/api/books', json={'title': title, 'author': 'Herbert', 'external_id': external_id})
    return response.get_json()['id']


def test_create_and_list_shelves(client):
    response = client.post('/api/shelves', json={'name': 'Favourites'})
    assert response.status_code == 201
    shelf = response.get_json()
    assert shelf['name'] == 'Favourites'
    assert shelf['created_at']

    assert [s['name'] for s in client.get('/api/shelves').get_json()] == ['Favourites']


def test_create_shelf_invalid(client):
    assert client.post('/api/shelves', json={}).status_code == 400
    assert client.post('/api/shelves', json={'name': ' '}).status_code == 400
    assert client.post('/api/shelves', json={'title': 'x'}).status_code == 400


def test_create_duplicate_shelf(client):
    client.post('/api/shelves', json={'name': 'Favourites'})
    assert client.post('/api/shelves', json={'name': 'Favourites'}).status_code == 409


def test_shelve_and_unshelve_book(client):
    book_id = _add_book(client)
    shelf_id = client.post('/api/shelves', json={'name': 'Favourites'}).get_json()['id']

    response = client.put(f'/api/shelves/{shelf_id}/books/{book_id}')
    assert response.status_code == 200

    books = client.get(f'/api/shelves/{shelf_id}/books').get_json()
    assert [b['id'] for b in books] == [book_id]

    assert client.delete(f'/api/shelves/{shelf_id}/books/{book_id}').status_code == 204
    assert client.delete(f'/api/shelves/{shelf_id}/books/{book_id}').status_code == 404
    assert client.get(f'/api/shelves/{shelf_id}/books').get_json() == []


def test_shelve_unknown_book_or_shelf(client):
    book_id = _add_book(client)
    shelf_id = client.post('/api/shelves', json={'name': 'Favourites'}).get_json()['id']

    assert client.put(f'/api/shelves/{shelf_id}/books/999').status_code == 404
    assert client.put(f'/api/shelves/999/books/{book_id}').status_code == 404
    assert client.get('/api/shelves/999/books').status_code == 404


def test_deleting_book_removes_it_from_shelves(client):
    book_id = _add_book(client)
    shelf_id = client.post('/api/shelves', json={'name': 'Favourites'}).get_json()['id']
    client.put(f'/api/shelves/{shelf_id}/books/{book_id}')

    assert client.delete(f'/api/books/{book_id}').status_code == 204
    assert client.get(f'/api/shelves/{shelf_id}/books').get_json() == []


def test_delete_shelf(client):
    shelf_id = client.post('/api/shelves', json={'name': 'Favourites'}).get_json()['id']

    assert client.delete(f'/api/shelves/{shelf_id}').status_code == 204
    assert client.delete(f'/api/shelves/{shelf_id}').status_code == 404
    assert client.get('/api/shelves').get_json() == []


def test_shelf_ids_outside_integer_range(client):
    book_id = _add_book(client)
    shelf_id = client.post('/api/shelves', json={'name': 'Favourites'}).get_json()['id']
    huge = 2 ** 70

    assert client.get(f'/api/shelves/{huge}/books').status_code == 404
    assert client.delete(f'/api/shelves/{huge}').status_code == 404
    assert client.put(f'/api/shelves/{huge}/books/{book_id}').status_code == 404
    assert client.put(f'/api/shelves/{shelf_id}/books/{huge}').status_code == 404
    assert client.delete(f'/api/shelves/{shelf_id}/books/{huge}').status_code == 404
