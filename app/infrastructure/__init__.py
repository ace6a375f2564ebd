"""Infrastructure modules for the notification service.

Centralized infrastructure components:
- configuration: Settings management (Settings and section classes)
- logging: Structured logging setup and context binding
- operations: Operation results returned by external clients
- clients: AWS client wrappers (DynamoDB)
- messaging: AMQP broker adapter and queue consumer pool
- notifications: Notification records, channels, delivery and retries
- services: Dependency injection (get_settings, get_container, SettingsDep)
"""
