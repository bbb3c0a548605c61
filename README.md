# typedb

`typedb` maps the rows of hand-written SQL onto dataclass models. You write the
SQL; `typedb` turns each result row into an instance of your model, loads a model
in place by its primary, unique or composite key, and builds `UPDATE` statements
from the fields you have set.

## Installing

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## The executor

`typedb` does not open connections itself. You hand it an object that subclasses
`typedb.types.Executor` and implements:

- `exec(query, *args)` – run a statement that returns no rows.
- `query_all(query, *args)` – return every row as a list of dicts keyed by column
  name.
- `query_row_map(query, *args)` – return the first row as a dict, and raise
  `typedb.types.NotFoundError` when there is none.

An executor may also set a `driver_name` attribute (`"postgres"`, `"sqlite3"`,
`"mysql"`, `"sqlserver"`/`"mssql"`, `"oracle"`); `update()` uses it to choose
identifier quoting, placeholders and the timestamp function.

Errors raised by `typedb` derive from `typedb.types.TypedbError`. Others you may
meet: `typedb.fields.FieldNotFoundError`, `typedb.fields.MethodNotFoundError` and
`typedb.model.DeserializeError` (a column value that cannot be stored in its
field's type).

`typedb.types.Config` is a dataclass of connection and pool settings (`dsn`,
`max_open_conns` = 10, `max_idle_conns` = 5, `conn_max_lifetime` = 30 min,
`conn_max_idle_time` = 5 min, `op_timeout` = 5 s) for your own connection code;
nothing in `typedb` reads it.

## Defining models

A model is a dataclass that subclasses `typedb.types.Model`. Declare each column
with `typedb.fields.column(db=..., load=..., db_update=..., default=...)`:

- `db` – the column name; `"-"` or empty keeps the field out of database work.
- `load` – `"primary"`, `"unique"` or `"composite:<name>"`, comma-separated when a
  field plays several roles.
- `db_update` – `"false"` keeps the field out of `UPDATE`; `"auto-timestamp"`
  sets it from the database clock on update.
- `default` – the starting value. Every field needs one, since rows are read into
  instances created with no arguments.

Lookups are methods named `query_by_<field>` that return SQL; updates need a
`table_name` method.

```python
from dataclasses import dataclass

from typedb.fields import column
from typedb.registry import register_model
from typedb.types import Model


@register_model
@dataclass
class User(Model):
    id: int = column(db="id", load="primary", default=0)
    name: str = column(db="name", default="")
    email: str = column(db="email", load="unique", default="")
    updated_at: str = column(db="updated_at", db_update="auto-timestamp", default="")

    def table_name(self):
        return "users"

    def query_by_id(self):
        return "SELECT id, name, email, updated_at FROM users WHERE id = $1"

    def query_by_email(self):
        return "SELECT id, name, email, updated_at FROM users WHERE email = $1"
```

When a row is read, each column value is converted to the field's annotated type
(`int`, `float`, `str`, `bool`, `bytes`, `Decimal`, `date`, `time`, `datetime`);
a `None` value becomes `None` for optional fields and the type's zero value
otherwise. Columns missing from the row leave the field as it is.

## Registry

`typedb.registry` keeps the registered model classes:

- `register_model(cls)` – register a class (also a decorator); repeats are ignored.
- `register_model_with_options(cls, ModelOptions(partial_update=True))` – register
  and set options.
- `get_model_options(cls)`, `get_registered_models()`, `reset_registry()`.

## Querying

```python
from typedb.query import query_all, query_first, query_one

users = query_all(executor, User, "SELECT id, name, email FROM users")
user = query_first(executor, User, "SELECT id, name, email FROM users WHERE id = $1", 1)
user = query_one(executor, User, "SELECT id, name, email FROM users WHERE id = $1", 1)
```

- `query_all` returns a list, empty when nothing matches.
- `query_first` returns `None` when nothing matches.
- `query_one` lets `NotFoundError` through when nothing matches.

Rows can also be read directly with `typedb.model.deserialize(row, model)` and
`typedb.model.deserialize_for_type(cls, row)`.

## Loading by key

```python
from typedb.load import load, load_by_field, load_by_composite

user = User(id=123)
load(executor, user)                     # calls user.query_by_id()

user = User(email="alice@example.com")
load_by_field(executor, user, "email")   # calls user.query_by_email()
```

For composite keys, the fields tagged `composite:<name>` (at least two) are sorted
by field name; the method is `query_by_` followed by those names joined with `_`,
and their values are passed in the same order:

```python
@register_model
@dataclass
class UserPost(Model):
    user_id: int = column(db="user_id", load="composite:userpost", default=0)
    post_id: int = column(db="post_id", load="composite:userpost", default=0)

    def query_by_post_id_user_id(self):
        return "SELECT user_id, post_id FROM user_posts WHERE post_id = $1 AND user_id = $2"


link = UserPost(user_id=1, post_id=2)
load_by_composite(executor, link, "userpost")
```

Each load copies the row into the model in place (see
`typedb.load.update_model_in_place`). It raises `TypedbError` when a key field is
unset (zero or `None`) or the `query_by_...` method is missing, and lets
`NotFoundError` through when no row matches.

## Updating

```python
from typedb.update import update

update(executor, User(id=123, name="New Name"))
# with driver_name "postgres":
# UPDATE "users" SET "name" = $1, "updated_at" = CURRENT_TIMESTAMP WHERE "id" = $2
```

Fields at their zero value or `None` are not written, and the primary key must be
set. Models with dots in their `db` tags are refused. If the executor raises, the
error is re-raised as `TypedbError`. The helpers `quote_identifier`, `placeholder`
and `timestamp_function` in `typedb.update` are available on their own.

### Partial updates

Register a model with `partial_update` and `typedb` keeps a copy of it whenever it
is read from a row; `update` then writes only the columns that changed since, and
refreshes the copy afterwards:

```python
from typedb.registry import ModelOptions, register_model_with_options

register_model_with_options(User, ModelOptions(partial_update=True))

user = User(id=123)
load(executor, user)
user.name = "Renamed"
update(executor, user)   # only "name" is written
```

`typedb.update.changed_fields(model, primary_field_name)` returns the set of
changed column names, or `None` when no copy has been kept.

## What typedb does not do

- It has no database drivers and opens no connections or transactions; you supply
  the executor.
- It builds no `INSERT` or `DELETE` statements; only `UPDATE` is generated.
- It does not validate registered models ahead of time; missing `query_by_...` or
  `table_name` methods are reported when they are needed.