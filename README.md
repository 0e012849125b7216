# kbroker

Building blocks for a key broker service, and a command line client for a
broker's administrative HTTP API.

## Modules

- `kbroker.errors`: `KbsError` and its subclasses (`ReadSecretFailed`,
  `PolicyReject`, `FailedAuthentication` and others). Each error has
  `error_type()` (`kbs/errors/<ClassName>`), `status_code()` (404 for
  `ReadSecretFailed`, 401 for every other error) and `to_response()`, which
  returns the status code and a JSON body with `type` and `detail`.
- `kbroker.session`: `Request`, `Challenge`, `Session` and `SessionMap`.
  `new_session(request, timeout, challenge, version_req)` checks the request
  version against a requirement such as `^0.1.0` and starts a session that
  lasts `timeout` minutes. `Session.attest()` moves it to the attested state.
  `Session.cookie()` returns a `kbs-session-id` cookie with its expiry time.
- `kbroker.resource`: `ResourceDesc` (`<repository>/<type>/<tag>`),
  the abstract `Repository`, `LocalFs`, which keeps resources as files under a
  directory, and `RepositoryConfig.initialize()`, which creates that directory
  and its `default` repository.
- `kbroker.token`: the abstract `AttestationTokenVerifier` and
  `AttestationTokenVerifierConfig`.
- `kbroker.attestation`: `Tee` and the abstract `Attest` service. Its default
  `generate_challenge()` returns a random 32-byte base64 nonce. Its default
  `set_policy()` raises.
- `kbroker.policy`: the abstract `PolicyEngineInterface`,
  `PolicyEngineConfig` and the `ResourcePolicyError` family.
- `kbroker.http_resource`: `get_resource()` serves a resource request.
  It takes the attestation claims from an attested session, or failing that
  from a verified bearer token. It then checks the claims against an optional
  policy engine and returns the resource in a JWE. `jwe()` encrypts the data
  with a fresh AES-256-GCM key (`A256GCM`) and wraps that key with the TEE's
  RSA key (`RSA1_5`).
- `kbroker.http_config`: `authorize()` checks that a bearer JWT is signed by the
  owner's Ed25519 key. `attestation_policy()`, `resource_policy()` and
  `set_resource()` handle the administrative requests.
- `kbroker.client`: `sign_auth_token()`, `build_http_client()`,
  `set_attestation_policy()`, `set_resource_policy()` and `set_resource()`.
  These functions call a broker's `kbs/v0` administrative endpoints.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line client

Every subcommand of `kbroker config` signs its request with the owner's
Ed25519 private key, given in PEM format.

```
kbroker --url http://127.0.0.1:8080 config --auth-private-key owner.pem \
    set-resource --path my_repo/key/example --resource-file secret.bin

kbroker config --auth-private-key owner.pem \
    set-attestation-policy --policy-file policy.rego --type rego --id default

kbroker config --auth-private-key owner.pem \
    set-resource-policy --policy-file resource-policy.rego
```

`--url` defaults to `http://127.0.0.1:8080`. If the server's certificate
comes from a custom authority, pass that authority's PEM file with
`--cert-file`. On success the command prints the uploaded content in base64.
On failure it prints the error and exits with status 1.

## Library use

```python
from kbroker.client import set_resource

with open("owner.pem") as f:
    auth_key = f.read()

set_resource("http://127.0.0.1:8080", auth_key, b"secret", "my_repo/key/example")
```

A request that does not return 200 raises `RuntimeError`, and the error
message includes the server's response text.

## What this package does not do

- It does not run an HTTP server. The endpoint functions take the request's
  parts as arguments and return a result or raise a `KbsError`. Connecting them
  to a web framework is up to the caller.
- It has no concrete attestation service, token verifier or policy engine.
  `Attest`, `AttestationTokenVerifier` and `PolicyEngineInterface` must be
  implemented by the caller.
- The client cannot attest or fetch resources. It only uploads policies and
  resources.