from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "consumer" (
    "id" UUID NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "water_meter_no" VARCHAR(64) NOT NULL UNIQUE,
    "full_name" VARCHAR(255) NOT NULL,
    "full_address" VARCHAR(255),
    "registered_voter" BOOL NOT NULL DEFAULT False
);
COMMENT ON COLUMN "consumer"."registered_voter" IS 'Registered voters get the year-of-service discount';
COMMENT ON TABLE "consumer" IS 'A billed water service account.';
CREATE TABLE IF NOT EXISTS "meter_readings" (
    "id" UUID NOT NULL PRIMARY KEY,
    "reading_date" DATE,
    "previous_reading" DECIMAL(10,2) NOT NULL DEFAULT 0,
    "present_reading" DECIMAL(10,2) NOT NULL DEFAULT 0,
    "consumption_cubic_meters" DECIMAL(10,2) NOT NULL DEFAULT 0,
    "reading_assigned" BOOL NOT NULL DEFAULT False,
    "meter_changed" BOOL NOT NULL DEFAULT False,
    "remarks" TEXT,
    "meter_image" VARCHAR(512),
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "consumer_id" UUID NOT NULL REFERENCES "consumer" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "meter_readings"."meter_changed" IS 'Closing reading of a retired meter; next reading starts at 0';
COMMENT ON TABLE "meter_readings" IS 'A (previous, present) pair recorded for a consumer''s meter.';
CREATE TABLE IF NOT EXISTS "billings" (
    "id" UUID NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "billing_month" DATE NOT NULL,
    "consumption_10_or_below" DECIMAL(10,2) NOT NULL,
    "amount_10_or_below" DECIMAL(10,2) NOT NULL,
    "amount_10_or_below_with_discount" DECIMAL(10,2) NOT NULL,
    "consumption_over_10" DECIMAL(10,2) NOT NULL,
    "amount_over_10" DECIMAL(10,2) NOT NULL,
    "amount_current_billing" DECIMAL(10,2) NOT NULL,
    "discount_percentage" DECIMAL(5,2) NOT NULL DEFAULT 0,
    "arrears_to_be_paid" DECIMAL(10,2) NOT NULL DEFAULT 0,
    "total_amount_due" DECIMAL(10,2) NOT NULL,
    "due_date" DATE NOT NULL,
    "arrears_after_due_date" DECIMAL(10,2),
    "payment_status" VARCHAR(7) NOT NULL DEFAULT 'unpaid',
    "amount_paid" DECIMAL(10,2) NOT NULL DEFAULT 0,
    "payment_date" TIMESTAMPTZ,
    "consumer_id" UUID NOT NULL REFERENCES "consumer" ("id") ON DELETE CASCADE,
    "meter_reading_id" UUID NOT NULL UNIQUE REFERENCES "meter_readings" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "billings"."payment_status" IS 'UNPAID: unpaid\nPARTIAL: partial\nPAID: paid\nOVERDUE: overdue';
COMMENT ON TABLE "billings" IS 'A monthly water bill produced from one meter reading.';
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSONB NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        """
