"""
ServiceFlow - booking platform for influencers and creators.

Roles:
- Influencer: books creative services
- Creator: offers services, onboarded through a 6-step wizard
- Admin: oversees creators and bookings
"""

__version__ = "1.0.0"
