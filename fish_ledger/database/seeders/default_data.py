from ...constants import (
    DEFAULT_COMMISSION_PCT,
    NUMBER_SEQUENCES,
    SETTING_ALLOW_NEGATIVE_STOCK,
    SETTING_DEFAULT_COMMISSION_PCT,
)


def seed(conn):
    # number sequences: only insert missing rows, never reset counters
    for name, (prefix, length) in NUMBER_SEQUENCES.items():
        conn.execute("""
            INSERT OR IGNORE INTO number_sequences(name, prefix, current_number, number_length)
            VALUES (?, ?, 0, ?)
        """, (name, prefix, length))

    # settings defaults
    for key, value in (
        (SETTING_ALLOW_NEGATIVE_STOCK, "false"),
        (SETTING_DEFAULT_COMMISSION_PCT, str(DEFAULT_COMMISSION_PCT)),
    ):
        conn.execute("INSERT OR IGNORE INTO settings(key, value) VALUES (?, ?)", (key, value))
    conn.commit()
