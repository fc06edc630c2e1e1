# salesanalytics

A small HTTP service that loads sales records from a CSV file into MongoDB
and reports revenue over a date range.

## Installing

```
pip install .
```

## Configuration

On startup the service reads two files from the working directory:

- `config.yaml` (also found as `config.yml` or `config`)
- `.env`

Both must be present. Values from `.env` are merged over `config.yaml`.
The environment variables `DB_URI`, `DB_NAME`, `DB_TIME` and `APP_PORT` win
over both files when they are set to a non-empty value. Key names are
matched without regard to case.

`config.yaml`:

```yaml
environment: development
logger:
  fileName: app.log
  fileSize: 10
  maxLogFile: 5
  maxRetention: 30
  compressLog: false
  level: INFO
```

`.env`:

```
DB_URI=mongodb://localhost:27017
DB_NAME=sales
APP_PORT=8080
```

`load_config()` in `salesanalytics.settings` raises `ConfigError` when a file
is missing, a value cannot be converted, or `DB_URI` or `DB_NAME` is empty.
When `environment` is anything other than `production`, `DB_TIME` is set
to 1000.

### Logging

Log entries are written as one JSON object per line, both to standard
output and to the file named by `logger.fileName`:

- `level` is one of `DEBUG`, `INFO`, `WARN`, `ERROR`, `FATAL`; any other
  value means `INFO`.
- `fileSize` is the size in megabytes at which the file is rotated
  (100 when it is 0).
- Rotated files get a timestamp in their name; `maxLogFile` limits how many
  are kept and `maxRetention` removes those older than that many days
  (0 disables either limit).
- `compressLog: true` gzips rotated files.
- With no `fileName`, the log goes to `<program>-lumberjack.log` in the
  system temporary directory.

## Running

```
salesanalytics
```

This starts a threaded HTTP server on all interfaces at `APP_PORT`.
If `APP_PORT` is empty, the operating system picks a free port.
Every day at midnight (local time) it loads `sample.csv` from the working
directory in the background. SIGINT or SIGTERM shuts the server down
cleanly.

The command exits with status 1 if:

- the configuration cannot be read; it prints `Not able to get config files: ...`
- the MongoDB client cannot be created
- the server cannot be started

## Endpoints

| Method | Path                                    | Purpose                                      |
|--------|-----------------------------------------|----------------------------------------------|
| GET    | `/load-data/`                           | Start loading `sample.csv` in the background |
| GET    | `/analytics/total-revenue`              | Total revenue                                |
| GET    | `/analytics/total-revenue-by-product`   | Revenue grouped by product                   |
| GET    | `/analytics/total-revenue-by-category`  | Revenue grouped by category                  |
| GET    | `/analytics/total-revenue-by-region`    | Revenue grouped by region                    |

The analytics endpoints need `start` and `end` query parameters in
`YYYY-MM-DD` form, for example:

```
/analytics/total-revenue?start=2024-01-01&end=2024-12-31
```

### Date range

Both dates are taken as midnight UTC. An order counts if its sale date is
between them, inclusive. Sale dates are stored as midnight UTC, so orders
on the end date are included.

### Revenue

Revenue for an order is `quantity * unit_price * (1 - discount) + shipping_cost`.

### Responses

A successful response looks like:

```json
{"statusCode": 200, "statusMessage": "Total revenue retrieved successfully",
 "data": {"total_revenue": 1234.5}}
```

For the grouped endpoints, `data.total_revenue` is a list of
`{"_id": <group value>, "totalRevenue": <sum>}` objects. Product groups are
keyed by the product's object id, written as a string.

An invalid date range gives status 400:

- `total-revenue` answers with the standard error body.
- The grouped endpoints answer with `{"error": "invalid start date"}` or
  `{"error": "invalid end date"}`.

The standard error body holds `apiPath`, `errorCode`, `errorMessage` and
`errorTime`. A database failure gives status 500 with that body.

### CORS

Any origin is allowed. Preflight requests are answered with status 204.

## CSV columns

`Order ID`, `Product ID`, `Customer ID`, `Product Name`, `Category`,
`Region`, `Date of Sale` (`DD-MM-YYYY`), `Quantity Sold`, `Unit Price`,
`Discount`, `Shipping Cost`, `Payment Method`, `Customer Name`,
`Customer Email`, `Customer Address`.

How cells are read:

- Missing or empty cells become empty text or zero.
- A sale date that does not parse is stored as the year-1 zero date.
- A numeric cell that cannot be read raises `ValueError`.

How rows are stored:

- Rows are processed in batches of 100.
- Customers, products and orders are upserted by `customer_id`,
  `product_id` and `order_id`, so loading the same file twice does not
  create duplicates.

## Using it as a library

```python
from salesanalytics.settings import load_config
from salesanalytics.database import connect
from salesanalytics.router import create_app

config = load_config()
with connect(config) as db:
    app = create_app(db)
    app.run(port=8080)
```

### Creating the app

`create_app(db, loader=None)` returns the Flask application. If no `loader`
is given, `/load-data/` runs
`salesanalytics.dataloader.load_sales_data(db)`.

### Loading data

`load_sales_data(db, path="sample.csv", batch_size=100)` loads a CSV
directly. It returns a `LoadResult` holding the customers, products and
orders that were built.

### Queries

`salesanalytics.repo` offers the queries on their own, each taking a
collection:

- `get_total_revenue`
- `grouped_revenue`
- `revenue_pipeline`
- `bulk_insert_customers`
- `bulk_insert_products`
- `bulk_insert_orders`

## What it does not do

- There are no endpoints to list, create, change or delete customers,
  products or orders; data enters only through the CSV loader.
- `salesanalytics.controllers.health_check` exists but is not mounted by
  `create_app`, so the server has no health-check route.
- There is no authentication.

## Tests

```
pip install .[test]
pytest
```