# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Shop FinSight
-------------

A Python-based financial tracker and reporting application for small
personal-services businesses (barbershops, salons, ...). It records income
transactions and expenses, aggregates them into monthly analytics and
produces report views exportable to CSV / JSON.

Main capabilities:
- an analytics engine with twelve report generators (summary, detailed and
  exception reports such as expense anomalies and revenue outliers),
- monthly dashboard analytics (KPIs, growth vs. previous month, trends,
  service distribution),
- a database-first architecture for transactions and expenses (SQLite),
- CRUD operations and CSV imports for transactions and expenses,
- business currency conversion with a static rate table,
- sample data generation for demos.

Shop FinSight separates computation (engine), configuration (TOML), and
presentation (CLI), making it suitable for scripting and automation.


Version: 0.1.0

Usage:
    python -m shop_finsight.cli --help
"""

__all__ = ["engine", "dashboard", "views", "io"]

__version__ = "0.1.0"
