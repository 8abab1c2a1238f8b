"""Sales order / invoice dashboard engine (UI-agnostic).

This package contains:
- record normalisation (ERP documents -> pandas record frames)
- status classification and branch/department taxonomy decoding
- filter criteria and cross-filtering
- aggregations and page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
