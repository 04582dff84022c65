"""DDL for the cellar database. Every statement is idempotent."""

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id          uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    email       text NOT NULL UNIQUE,
    created_at  timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS auth_tokens (
    token_hash    text PRIMARY KEY,
    user_id       uuid NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at    timestamptz NOT NULL DEFAULT now(),
    last_used_at  timestamptz
);

CREATE TABLE IF NOT EXISTS wineries (
    id            uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id       uuid NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name          text NOT NULL,
    country_code  char(2),
    created_at    timestamptz NOT NULL DEFAULT now(),
    updated_at    timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS wines (
    id                  uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id             uuid NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    winery_id           uuid REFERENCES wineries(id) ON DELETE SET NULL,
    name                text NOT NULL,
    grapes              text[] NOT NULL DEFAULT '{}',
    vintage             integer,
    quantity            integer NOT NULL DEFAULT 1 CHECK (quantity >= 0),
    price               numeric(10, 2),
    bottle_size         integer NOT NULL DEFAULT 750,
    drink_window_start  integer,
    drink_window_end    integer,
    food_pairings       text,
    photo_url           text,
    created_at          timestamptz NOT NULL DEFAULT now(),
    updated_at          timestamptz NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS wines_user_idx ON wines (user_id);
CREATE INDEX IF NOT EXISTS wines_winery_idx ON wines (winery_id);

CREATE TABLE IF NOT EXISTS tasting_notes (
    id          uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    wine_id     uuid NOT NULL REFERENCES wines(id) ON DELETE CASCADE,
    user_id     uuid NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    rating      integer NOT NULL CHECK (rating BETWEEN 1 AND 5),
    notes       text,
    tasted_at   date NOT NULL DEFAULT current_date,
    created_at  timestamptz NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS tasting_notes_wine_idx ON tasting_notes (wine_id);

CREATE TABLE IF NOT EXISTS stock_movements (
    id             uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    wine_id        uuid NOT NULL REFERENCES wines(id) ON DELETE CASCADE,
    user_id        uuid NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    movement_type  text NOT NULL CHECK (movement_type IN ('in', 'out')),
    quantity       integer NOT NULL CHECK (quantity > 0),
    notes          text,
    movement_date  timestamptz NOT NULL DEFAULT now(),
    created_at     timestamptz NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS stock_movements_wine_idx ON stock_movements (wine_id);

CREATE TABLE IF NOT EXISTS cellars (
    id           uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id      uuid NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name         text NOT NULL,
    description  text,
    created_at   timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS wine_locations (
    id          uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id     uuid NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    wine_id     uuid NOT NULL REFERENCES wines(id) ON DELETE CASCADE,
    cellar_id   uuid NOT NULL REFERENCES cellars(id) ON DELETE CASCADE,
    shelf       integer CHECK (shelf > 0),
    "row"       integer CHECK ("row" > 0),
    "column"    integer CHECK ("column" > 0),
    quantity    integer NOT NULL DEFAULT 1 CHECK (quantity > 0),
    created_at  timestamptz NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS wine_locations_cellar_idx ON wine_locations (cellar_id);

CREATE TABLE IF NOT EXISTS user_settings (
    user_id     uuid NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    key         text NOT NULL,
    value       jsonb,
    updated_at  timestamptz NOT NULL DEFAULT now(),
    PRIMARY KEY (user_id, key)
);
"""
