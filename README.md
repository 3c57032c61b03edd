# stowage

A small library that describes storage in one vocabulary:

- a **location** is a storage account or a root directory,
- a **container** is a bucket or a directory inside it,
- an **item** is an object or a file.

Containers and items are listed a page at a time with a prefix, a cursor and
a count. An empty cursor starts a listing. An empty cursor in the reply means
the listing is finished (`stowage.errors.is_cursor_end`).

The local filesystem backend is complete. The cloud modules hold only the
rules each service imposes, without a client (see below).

## Installing

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Local storage

`stowage.local.location.LocalLocation` takes a configuration mapping with a
`path` key that names an existing directory. A missing key raises
`stowage.errors.StowError`, as does a path that is not a directory. The
location can be used as a context manager.

```python
from stowage.local.location import LocalLocation

with LocalLocation({"path": "/srv/data"}) as location:
    photos = location.create_container("photos")
    with open("cat.jpg", "rb") as fh:
        item = photos.put("2024/cat.jpg", fh, 12345)

    items, cursor = photos.items(prefix="2024/", cursor="", count=10)
    for entry in items:
        print(entry.name, entry.size(), entry.last_mod())
```

Locations:

- `containers(prefix, cursor, count)` lists the subdirectories of the root
  whose names start with `prefix`, sorted by name. When both the prefix and
  the cursor are empty, the first entry is a container named `All` that
  covers the whole root directory. The returned cursor is the id of the first
  container on the next page.
- `container(container_id)` accepts an absolute path or a name relative to
  the root.
- `create_container(name)` makes a new directory under the root.
- `remove_container(container_id)` deletes the directory and everything in
  it.
- `item_by_url(url)` returns the item for a `file` URL. The item's name is
  the last part of the path.

A container's `id` is its absolute path. Its `url` is a `file` URL.

Containers (`stowage.local.container.LocalContainer`):

- `items(prefix, cursor, count)` walks every file under the directory in
  sorted order. The cursor is the relative path of the first file on the next
  page.
- `item(item_id)` accepts an absolute path or a name relative to the
  container.
- `put(name, stream, size, metadata=None)` writes the stream to a file and
  creates any parent directories. It raises `StowError("bad size")` when the
  number of bytes written differs from `size`.
- `create_item(name)` returns a new item and a writable binary file.
- `remove_item(item_id)` deletes a file by its full path.

The module-level function `flat_files(path)` lists every file below a
directory as pairs of a relative path and an lstat result.

Items (`stowage.local.item.LocalItem`) have `id` (the full path), `name` (the
path inside the container, with `/` separators) and `url` properties. They
also have the methods `size()`, `etag()` (the modification time as text),
`last_mod()`, `open()` and `metadata()`.

Errors:

- A cursor that is not found raises `stowage.errors.BadCursorError`.
- A missing container or item raises `stowage.errors.NotFoundError`.
- Local items cannot carry user metadata. A `put` with non-empty metadata
  raises `stowage.errors.NotSupportedError`.

`metadata()` describes the file itself. `stowage.local.filedata.get_file_metadata`
builds this description. It holds the path, directory, name, mode (octal and
decimal), permission string, size, link state and link target, and the
access and modification times. Outside Windows it also holds the inode, the
hard link count and the uid/gid. It includes the extension when the name has
one.

## Cloud helpers

These modules contain no code that talks to a service:

- `stowage.azure`
  - configuration checks
  - ETag cleaning (`clean_etag`)
  - block size selection and block ids for multi-part uploads
    (`determine_chunk_size`, `encoded_block_id`, `iter_blocks`)
  - metadata conversion
  - item URL parsing
- `stowage.b2`
  - configuration checks
  - metadata conversion
  - item URL parsing
  - bucket filtering
  - `page_items`: prefix-aware paging over any file listing callable that
    returns `FileEntry` records
- `stowage.google`
  - configuration checks
  - scope parsing
  - media link conversion (`prep_url`)
  - metadata conversion
  - item URL parsing
- `stowage.oracle`
  - configuration checks
  - derivation of the Swift user name and tenant from the authorization
    endpoint (`parse_config`, returning `SwiftSettings`)
  - `Last-Modified` header fixing
  - metadata header conversion
  - item URL building and parsing
  - next-page markers

```python
from stowage import azure

azure.validate_config({"account": "myaccount", "key": "placeholder"})
azure.clean_etag('W/"abc123"')        # -> "abc123"
azure.determine_chunk_size(10)        # -> 4194304
```

## What this package does not do

- There is no client for Azure, Backblaze B2, Google Cloud Storage or Oracle
  storage. The cloud modules do not connect, authenticate, upload or download
  anything. They only check, convert and parse data for code that does.
- There is no registry that opens a location by kind name or by URL.
  Construct `LocalLocation` directly.
- There is no command-line program.