"""CMS administration backend: users, permission groups and authorities."""
