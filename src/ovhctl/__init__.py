"""ovhctl - command line interface to the OVHcloud API.

Inventories public cloud tenants, instances, load balancers, dedicated
servers and DNS zones, and keeps DNS records in sync with the public
addresses of running instances.
"""

__version__ = "0.1.8"
