# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Currency helpers for Shop FinSight.

Stored amounts are expressed in the business currency. When the user changes
that currency, every stored price and amount is converted with the static
rate table below. The rates are indicative only and are never refreshed.
"""

SUPPORTED_CURRENCIES: dict[str, str] = {
    "USD": "US Dollar ($)",
    "EUR": "Euro (€)",
    "GBP": "British Pound (£)",
    "ZAR": "South African Rand (R)",
    "CAD": "Canadian Dollar (C$)",
    "AUD": "Australian Dollar (A$)",
    "JPY": "Japanese Yen (¥)",
    "INR": "Indian Rupee (₹)",
    "BRL": "Brazilian Real (R$)",
    "CNY": "Chinese Yuan (¥)",
}

EXCHANGE_RATES: dict[str, dict[str, float]] = {
    "USD": {"ZAR": 18.5, "EUR": 0.92, "GBP": 0.79, "CAD": 1.36, "AUD": 1.52,
            "JPY": 149.5, "INR": 83.2, "BRL": 4.97, "CNY": 7.24},
    "ZAR": {"USD": 0.054, "EUR": 0.05, "GBP": 0.043, "CAD": 0.074, "AUD": 0.082,
            "JPY": 8.08, "INR": 4.5, "BRL": 0.27, "CNY": 0.39},
    "EUR": {"USD": 1.09, "ZAR": 20.1, "GBP": 0.86, "CAD": 1.48, "AUD": 1.65,
            "JPY": 162.5, "INR": 90.4, "BRL": 5.41, "CNY": 7.87},
    "GBP": {"USD": 1.27, "ZAR": 23.4, "EUR": 1.16, "CAD": 1.72, "AUD": 1.92,
            "JPY": 189.2, "INR": 105.3, "BRL": 6.3, "CNY": 9.16},
    "CAD": {"USD": 0.74, "ZAR": 13.6, "EUR": 0.68, "GBP": 0.58, "AUD": 1.12,
            "JPY": 110, "INR": 61.2, "BRL": 3.66, "CNY": 5.33},
    "AUD": {"USD": 0.66, "ZAR": 12.2, "EUR": 0.61, "GBP": 0.52, "CAD": 0.89,
            "JPY": 98.3, "INR": 54.7, "BRL": 3.27, "CNY": 4.76},
    "JPY": {"USD": 0.0067, "ZAR": 0.124, "EUR": 0.0062, "GBP": 0.0053,
            "CAD": 0.0091, "AUD": 0.0102, "INR": 0.56, "BRL": 0.033, "CNY": 0.048},
    "INR": {"USD": 0.012, "ZAR": 0.22, "EUR": 0.011, "GBP": 0.0095, "CAD": 0.016,
            "AUD": 0.018, "JPY": 1.8, "BRL": 0.06, "CNY": 0.087},
    "BRL": {"USD": 0.20, "ZAR": 3.72, "EUR": 0.18, "GBP": 0.16, "CAD": 0.27,
            "AUD": 0.31, "JPY": 30.1, "INR": 16.7, "CNY": 1.46},
    "CNY": {"USD": 0.14, "ZAR": 2.55, "EUR": 0.13, "GBP": 0.11, "CAD": 0.19,
            "AUD": 0.21, "JPY": 20.6, "INR": 11.5, "BRL": 0.68},
}


def exchange_rate(old_currency: str, new_currency: str) -> float:
    """Return the rate from one currency to another (1.0 if unknown or equal)."""
    if old_currency == new_currency:
        return 1.0
    return float(EXCHANGE_RATES.get(old_currency, {}).get(new_currency, 1.0))
