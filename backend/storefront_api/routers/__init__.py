"""HTTP routers: admin panel endpoints and scheduled job triggers."""
