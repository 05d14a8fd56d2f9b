"""Reusable widgets: badges, breadcrumbs, charts, banners, QR codes."""
