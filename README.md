# photosite

A small JSON API server for a photography portfolio. It serves a paginated,
searchable photo list, photo details with EXIF data, tag and filter listings,
and counts views, likes and downloads per visitor. Download links are handed
out as short-lived pre-signed URLs to an OSS-style object store (V4
signature, computed locally).

## Installation

```
pip install .
```

The database layer uses SQLAlchemy's default `postgresql` dialect, so a
PostgreSQL driver for it (psycopg2) has to be installed alongside; it is not
pulled in as a dependency.

For running the test suite:

```
pip install ".[test]"
pytest
```

## Running

```
photosite
```

The command takes no options besides `--help`. It loads the configuration,
sets up JSON logging to stderr, connects to PostgreSQL (a failed connection
check exits with status 1), builds the download URL signer (missing settings
or credentials exit with status 1) and serves the API with a threaded
`wsgiref` server on the configured port until interrupted.

## Configuration

`photosite.config.load()` chooses the environment from `APP_ENV` (default
`local`) and reads `config.<env>.yaml` (also `.yml`, or no extension) from
`configs/`, `./configs/` or the current directory. A missing or unreadable
file raises `photosite.config.ConfigError`. Any leaf key can be overridden by a
non-empty environment variable named after its path, upper-cased, with dots
replaced by underscores (for example `APP_PORT` for `app.port`,
`SECURITY_BEHAVIOR_ENABLED` for `security.behavior.enabled`).

```yaml
app:
  name: photosite         # default photosite
  env: local              # defaults to APP_ENV
  port: 8080              # default 8080
server:
  read_timeout: 10        # seconds, default 10
  write_timeout: 15       # seconds, default 15
postgres:
  host: localhost
  port: 5432
  user: user
  password: password
  dbname: photos
  sslmode: disable        # default disable
  max_open_conns: 20      # default 20
  max_idle_conns: 10      # default 10
  conn_max_lifetime_minutes: 30
oss:
  bucket_name: photos
  endpoint: oss-my-region.storage.example.com
  region: my-region       # inferred from an "oss-<region>." endpoint if omitted
  public_base_url: https://photos.example.com
  presign_expire_seconds: 300   # default 300, at most 7 days
security:
  behavior:
    enabled: true
    window_seconds: 60
    ip_limit_per_window: 120
    suspicious_ip_limit_per_window: 20
log:
  level: info             # debug, info, warn or error
```

Object store credentials are read from the environment variables
`OSS_ACCESS_KEY_ID`, `OSS_ACCESS_KEY_SECRET` and, optionally,
`OSS_SESSION_TOKEN` when the signer is created.

## API

All responses share one envelope:

```json
{"code": 0, "message": "success", "data": {}}
```

| Method | Path | Purpose |
| ------ | ---- | ------- |
| GET  | `/api/v1/health` | service status and name |
| GET  | `/api/v1/photos` | photo list |
| GET  | `/api/v1/photos/<uuid>` | photo detail |
| GET  | `/api/v1/tags` | all tags |
| GET  | `/api/v1/filters` | years, categories, orientation counts and grouped tags |
| POST | `/api/v1/photos/<uuid>/view` | count a view (once per visitor per 10 minutes) |
| POST | `/api/v1/photos/<uuid>/like` | like a photo |
| POST | `/api/v1/photos/<uuid>/unlike` | remove a like |
| POST | `/api/v1/photos/<uuid>/download` | count a download (once per visitor per 30 minutes) and get a signed URL |

Every response carries permissive CORS headers, and `OPTIONS` requests are
answered with 204. Unhandled exceptions are logged and answered with HTTP 500,
code `50000`.

### Photo list parameters

- `q`: keywords separated by whitespace, commas, `，` or `、`; at most five
  distinct ones are used, matched against titles, filename and tag names.
- `page` (default 1), `pageSize` (default 30, at most 60).
- `sort`: `shot_time` (default), `like_count`, `view_count`,
  `download_count` or `created_at`; `order`: `desc` (default) or `asc`.
- `tags`: tag names with the same separators; `tagMode`: `any` (default) or
  `all`.
- `orientation`: `landscape`, `portrait` or `square`.
- `year` (1900–2100), `month` (1–12), `category`.

Out-of-range or unknown values fall back to their defaults. A non-integer
`page`, `pageSize`, `year` or `month` is rejected with HTTP 400, code `40000`.

### Visitors and abuse protection

Each request gets a visitor hash: the SHA-256 hex digest of client IP,
`User-Agent` and `Accept-Language` (`photosite.visitor.visitor_hash`). The
client IP is taken from `X-Forwarded-For` or `X-Real-IP` when they hold valid
addresses, otherwise from the socket.

The behaviour endpoints are rate limited per client IP within a fixed window
(`photosite.behavior_guard.BehaviorGuard`). Requests with an empty or
tool-like `User-Agent` (for example `python-requests`, `scrapy`, `crawler`,
`bot/`) are also counted against a much smaller limit. Exceeding a limit
returns HTTP 429 with code `42901` or `42902`. Counters live in process
memory.

### Error codes

| Code | Meaning |
| ---- | ------- |
| 40000 | invalid query params |
| 40002 | invalid uuid |
| 40003 | visitor hash missing |
| 40401 | photo not found |
| 42901 | too many behavior requests |
| 42902 | suspicious behavior blocked |
| 50000–50006 | internal server error (the last digit names the endpoint) |

## Using it as a library

`photosite.main.build_app(cfg, engine, signer, logger)` wires repositories,
services and handlers into a Flask application from a loaded
`photosite.config.Config`, a SQLAlchemy engine and a signer, so the server can
be run under any WSGI host. `photosite.router.create_app` builds the
application from handler objects directly, which is convenient for testing
with stub services. The smaller helpers (`photosite.pager`,
`photosite.search.parse_keywords`, `photosite.sorting`,
`photosite.photo_query.PhotoListRequest`,
`photosite.presign.PresignDownloadURLSigner`) can be used on their own.

## What it does not do

- It does not create or migrate the database. The tables `photos`, `tags`,
  `photo_tags`, `photo_views`, `photo_downloads` and `photo_likes` must
  already exist. While the `tags` table is missing, `/tags` answers with one
  placeholder entry per tag type.
- There are no endpoints for uploading, editing or publishing photos; only
  rows already marked as published are served.
- `photosite.stats_repository.StatsRepository` can ping the database but is
  not exposed as a route.