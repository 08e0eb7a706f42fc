# apiservice

A small HTTP API microservice. It runs two HTTP servers side by side, a
public one and an internal one. Both answer `GET /ping` with a JSON object
holding the application's name, version, description, author and the
caller's IP address:

```json
{"appName": "...", "appVersion": "...", "description": "...", "auther": "...", "clientIP": "..."}
```

The servers shut down gracefully on SIGINT or SIGTERM.

Around the servers the package provides:

- configuration read from a YAML file chosen by environment name,
- structured JSON logging to standard output, tagged with hostname,
  environment, application name and version,
- an in-process key/value cache whose items expire,
- a data access layer with user and address accessors over a cache and a
  database back end.

## Installing

```
pip install .
```

To run the tests, install the `test` extra and run pytest:

```
pip install ".[test]"
pytest
```

## Running

```
apiservice
```

The environment name comes from the `ENV` variable; when `ENV` is unset or
blank it is `dev`. The configuration is read from
`config/env/<env>/config.yaml`, relative to the working directory:

```
ENV=prod apiservice
```

If the configuration cannot be read or bound, or a server cannot start, the
command prints `api server initialization failed: <reason>` to standard
error and exits with status 1.

## Configuration

A configuration file looks like this:

```yaml
app:
  name: apiservice
  version: 1.0.0
  description: Example API service
  author: Example Team
  url: http://localhost

server:
  http:
    publicAddr: ":80"
    internalAddr: ":8080"
    readTimeoutInSeconds: 10
    WriteTimeoutInSeconds: 10
    shutdownTimeoutInSeconds: 5

logger:
  debug: false
  callerSkipNo: 3

dal:
  cache:
    appCache:
      enabled: true
      defaultExpirationInSeconds: 300
      cleanupIntervalInMinutes: 10
    redis:
      enabled: false
```

Missing keys take their zero value and unknown keys are ignored. A value of
the wrong type, a section that is not a mapping, invalid YAML or an empty
document raises `apiservice.config.ConfigError`. An address without a port
listens on port 80; an empty host listens on all interfaces. The smaller of
the read and write timeouts, when set, becomes the per-connection socket
timeout.

If `defaultExpirationInSeconds` or `cleanupIntervalInMinutes` is missing or
zero, the application cache uses 300 seconds and 10 minutes.

## Using it as a library

```python
from apiservice.config import load_config
from apiservice.dal import initialize_dal
from apiservice.logger import LoggerConfig, new_logger
from apiservice.web import Deps, register_public_routes

config = load_config("dev", ".")
logger = new_logger(LoggerConfig(env="dev", app_name=config.app.name,
                                 app_version=config.app.version))
app = register_public_routes(Deps(config=config, logger=logger,
                                  dal=initialize_dal(config)))

with app.test_client() as client:
    print(client.get("/ping").get_json())
```

- `apiservice.config`: `load_config(env, base_dir)` reads and binds a file;
  `parse_config(data)` binds a YAML document to a frozen `Config`.
- `apiservice.logger`: `new_logger(config, stream)` returns an INFO-level
  `logging.Logger` that writes one JSON object per line (time, level,
  source, message, identity fields, any `extra` fields, and the stack for
  exceptions) through `JsonFormatter`.
- `apiservice.appcache`: `new_app_cache(config)` returns an `AppCache` with
  `set(key, value, ttl)`, `get(key)` (raises `KeyError` when absent or
  expired), `delete`, `delete_expired` and `close`. It supports `in`,
  `len()` and use as a context manager; a background thread sweeps expired
  items.
- `apiservice.cache` and `apiservice.db`: `new_cache(config)` and
  `new_db(config)` return the enabled back ends (`AppCacheStore` and
  `MongoDatabase`).
- `apiservice.dal`: `initialize_dal(config)` returns a `DataAccessLayer`
  with `user.get_user_by_id(user_id)` and
  `address.get_address_by_user_id(user_id)`.
- `apiservice.web`: `register_public_routes(deps)` and
  `register_internal_routes(deps)` return Flask applications usable with any
  WSGI server or Flask's test client. An unhandled error in a handler is
  logged with its stack and answered with status 500.
- `apiservice.server`: `HttpServer(deps).start()` serves both addresses and
  blocks until `stop()` is called or a signal arrives; its `ready` event is
  set once both are listening. `start_servers(deps)` runs it.
- `apiservice.bootstrap`: `initialize(base_dir)` does all of the above and
  runs the servers; `main()` is the `apiservice` command.

Each request is logged to standard output in this format:

```
<client ip> - [<RFC 1123 time>] "<method> <path> <protocol> <status> <latency> "<user agent>" <error>"
```

## What it does not do

- Only `/ping` is served; there are no other API routes.
- No gRPC server listens; `start_grpc()` does nothing but log at debug level.
- `RedisCacheStore` has no Redis client, so every lookup misses.
- `MongoDatabase` and `MySqlDatabase` connect to nothing and define no
  collections or tables. The user and address accessors therefore return a
  document only when one is found in the cache, and `None` otherwise.