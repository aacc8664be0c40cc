from .fulfillment_publisher import FulfillmentStatusPublisher, publish_status_in_queue
