from amazon_pay.ipn.handler import IpnHandler

__all__ = ["IpnHandler"]
