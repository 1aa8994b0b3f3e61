import pytest

from shop_finsight.io import read_expenses_csv, read_transactions_csv


def write_csv(tmp_path, name: str, content: str):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_read_transactions_normalizes_columns_and_dates(tmp_path):
    path = write_csv(
        tmp_path,
        "transactions.csv",
        "Date, Service ,Price,Notes,Extra\n"
        "2025/01/05,Fade,30,,x\n"
        "2025/01/06, Shave ,25.5,Regular customer,y\n",
    )

    df = read_transactions_csv(path)

    assert list(df.columns) == ["date", "style", "price", "notes"]
    assert list(df["date"]) == ["2025-01-05", "2025-01-06"]
    assert list(df["style"]) == ["Fade", "Shave"]
    assert list(df["price"]) == [30.0, 25.5]
    assert list(df["notes"]) == ["", "Regular customer"]


def test_read_transactions_without_notes_column(tmp_path):
    path = write_csv(tmp_path, "t.csv", "date,style,price\n2025-01-05,Fade,30\n")

    df = read_transactions_csv(path)

    assert list(df["notes"]) == [""]


@pytest.mark.parametrize(
    "content, message",
    [
        ("date,price\n2025-01-05,30\n", "Invalid transactions structure"),
        ("date,style,price\nnot-a-date,Fade,30\n", "'date'"),
        ("date,style,price\n2025-01-05,Fade,abc\n", "Invalid numeric"),
        ("date,style,price\n2025-01-05,Fade,-3\n", "Negative"),
        ("date,style,price\n2025-01-05,,30\n", "Empty values in 'style'"),
    ],
)
def test_read_transactions_invalid_input(tmp_path, content, message):
    path = write_csv(tmp_path, "bad.csv", content)

    with pytest.raises(ValueError, match=message):
        read_transactions_csv(path)


def test_read_expenses_canonicalizes_types(tmp_path):
    path = write_csv(
        tmp_path,
        "expenses.csv",
        "DATE,Type,Description,Amount\n"
        "2025-01-01,fixed,Rent,750\n"
        "2025-01-02,SHORT-TERM,Supplies,42.5\n",
    )

    df = read_expenses_csv(path)

    assert list(df.columns) == ["date", "type", "description", "amount"]
    assert list(df["type"]) == ["Fixed", "Short-term"]
    assert list(df["amount"]) == [750.0, 42.5]


@pytest.mark.parametrize(
    "content, message",
    [
        ("date,type,amount\n2025-01-01,Fixed,10\n", "Invalid expenses structure"),
        ("date,type,description,amount\n2025-01-01,Monthly,Rent,10\n", "'type'"),
        ("date,type,description,amount\n2025-01-01,Fixed,,10\n", "'description'"),
    ],
)
def test_read_expenses_invalid_input(tmp_path, content, message):
    path = write_csv(tmp_path, "bad.csv", content)

    with pytest.raises(ValueError, match=message):
        read_expenses_csv(path)
