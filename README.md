# ethproofs

Asyncio building blocks for a block proving service. The package also has
command-line clients. They ask such a service to prove blocks and then wait
for the results.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command-line clients

Each client sends one HTTP GET request to the fetch service. It then opens a
websocket connection to the service and waits until it has received `--count`
block reports, or until the server closes the connection. Each report is
appended to a CSV file, which is `proving_report.csv` unless you pass
`--report-path`. The command exits with status 1 and prints the error if the
request, the connection or the decoding fails.

Prove 3 blocks, starting at block 20000000:

```
prove-block-by-number --start-block-num 20000000 --count 3
```

Prove the next 2 latest blocks:

```
prove-latest-block --count 2
```

Prove blocks again from inputs that were saved earlier:

```
reproduce-block-by-number --start-block-num 20000000 --report-path results.csv
```

`--count` defaults to 1. Set the service addresses with `--http-url` and
`--ws-url`. If you leave them out, the `FETCH_HTTP_URL` and `FETCH_WS_URL`
environment variables are used. A `.env` file found from the current
directory is loaded first. The last fallbacks are `http://127.0.0.1:8080` and
`ws://127.0.0.1:8080`.

The same steps are available as coroutines in `ethproofs.fetch_client`:

- `prove_block_by_number`, `prove_latest_block` and `reproduce_block_by_number`
  send the request and return the HTTP status code.
- `wait_for_proving_complete(ws_url, block_count, report_path=None)` returns
  the list of `BlockProvingReport` objects it received. If no `report_path` is
  given, it logs each report instead of writing it to a CSV file. It sends a
  websocket ping every 15 seconds.

## Service components

- `ethproofs.fetch_service.FetchService`
  - `create_app()` builds an aiohttp application. It serves HTTP GET on
    `/prove_block_by_number`, `/prove_latest_block` and
    `/reproduce_block_by_number`.
    - The query parameters are `start_block_num` (where the path takes it)
      and an optional `count`, which defaults to 1.
    - A valid request is turned into a fetch message and passed to the
      scheduler channel, and the response is `OK`.
    - A malformed query gets status 400. A closed channel gets status 500.
  - A websocket connection on `/` registers a watcher. It gets a text welcome
    message, then one binary report for every finished block.
  - `run()` serves on the configured address in a task. Cancelling the task
    stops the service.
- `ethproofs.scheduler.Scheduler` passes messages between the fetch service,
  the proof service channel, the fetcher and the proving client endpoints,
  and the reporter.
- `ethproofs.reporter.BlockReporter` sends every block report to all
  registered watchers. It drops a watcher once that watcher's channel is
  closed.
- `ethproofs.reproducing.ReproducingFromStartFetcher` loads saved inputs for a
  range of blocks from `BlockFetcherConfig.input_load_dir`. It then sends a
  `ProvingMsg` for each block.
- `ethproofs.channel` provides `UnboundedChannel`, `DuplexChannel` and
  `DuplexEndpoint`, which link these tasks together.
- `ethproofs.messages` defines the message types and `fetch_msg_from_params`.

## Saved proving inputs

`ethproofs.inputs.ProvingInputs.dump_to_dir(directory)` writes the inputs of
one block to `<directory>/block<N>/gas10000000/`. The files there are:

- `public_values.bin`
- `final_aggregator_stdin_builder.bin`
- `subblock_stdin_builder_<i>.bin`, one per subblock

`load_from_dir` reads the subblock files in order, up to 7 of them, and stops
at the first file that is missing. It raises `ValueError` if it finds no
subblock file. It raises `FileNotFoundError` if the block directory does not
exist.

## Report format

`ethproofs.report.BlockProvingReport.to_bytes()` produces the binary form
that is sent over the websocket, and `from_bytes()` decodes it. The layout is:

- a one-byte success flag;
- four little-endian unsigned 64-bit integers: block number, cycles, proving
  milliseconds and data-fetch milliseconds;
- an optional proof, written as a tag byte followed by a 64-bit length and the
  proof bytes.

`append_to_csv` writes the header if the file is new and then one row. Times
in the row are given in seconds:

```
block_number,success,cycles,proving_seconds,data_fetch_seconds
20000000,true,1234,10,0.5
```

## Logging

`ethproofs.logger.setup_logger()` installs a log handler once per process.

- `ETHPROOFS_LOG` sets the filter. It takes comma-separated directives. Each
  directive is either a level (`off`, `error`, `warn`, `info`, `debug`,
  `trace`) or `logger.name=level`. Logging is off by default, and an invalid
  filter also leaves it off.
- `ETHPROOFS_LOGGER` sets the output style:
  - `flat` (the default) adds timestamps;
  - `forest` shows only INFO records;
  - `forest-all` shows all records.

  Any other value raises `ValueError`.

## What this package does not do

- There is no command that starts the whole service. You have to build it
  yourself from the components above.
- It does not fetch blocks from an RPC node or generate proving inputs.
  Proving blocks from a start number or proving the latest blocks therefore
  has no fetcher here. Only reproducing from saved inputs is included.
- It has no client that sends inputs to a proving cluster, no gRPC service
  that receives proofs back, and no mock proving cluster.