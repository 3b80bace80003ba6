"""Notification delivery channels for the infrastructure layer."""

from .channels import (
    ChannelFactory,
    Delivery,
    DeliveryChannel,
    EmailChannel,
    EmailSender,
    InAppChannel,
    Recipient,
    build_channels,
)

__all__ = [
    "ChannelFactory",
    "Delivery",
    "DeliveryChannel",
    "EmailChannel",
    "EmailSender",
    "InAppChannel",
    "Recipient",
    "build_channels",
]
