import logging

from oceanview.core.config import settings
from oceanview.core.security import hash_password
from oceanview.schemas.catalog import AmenityCreate, CruiseCreate, DestinationCreate
from oceanview.schemas.enums import UserRole
from oceanview.schemas.feedback import TestimonialCreate
from oceanview.schemas.user import UserCreate
from oceanview.storage.base import Storage

logger = logging.getLogger(__name__)

DESTINATIONS = [
    dict(name="Caribbean", description="Explore crystal-clear waters, white sandy beaches, and vibrant island cultures.",
         image_url="https://images.unsplash.com/photo-1590523741831-ab7e8b8334b4",
         price_from=599, rating=4.5, cruise_count=12, duration_range="7-10 Days"),
    dict(name="Mediterranean", description="Visit ancient ruins, coastal villages, and enjoy delicious cuisine across Europe.",
         image_url="https://images.unsplash.com/photo-1602867741746-6df80f40c267",
         price_from=899, rating=5.0, cruise_count=15, duration_range="10-14 Days"),
    dict(name="Alaska", description="Experience breathtaking glaciers, wildlife sightings, and magnificent landscapes.",
         image_url="https://images.unsplash.com/photo-1473181488821-2d23949a045a",
         price_from=799, rating=4.5, cruise_count=8, duration_range="7-14 Days"),
    dict(name="Europe", description="Discover historic cities, cultural landmarks, and beautiful countryside.",
         image_url="https://images.unsplash.com/photo-1499856871958-5b9627545d1a",
         price_from=999, rating=4.8, cruise_count=10, duration_range="10-14 Days"),
    dict(name="Asia", description="Experience diverse cultures, ancient temples, and exotic cuisine.",
         image_url="https://images.unsplash.com/photo-1540959733332-eab4deabeeaf",
         price_from=1099, rating=4.7, cruise_count=6, duration_range="12-18 Days"),
    dict(name="Australia", description="Explore the Great Barrier Reef, scenic coastlines, and vibrant cities.",
         image_url="https://images.unsplash.com/photo-1523482580672-f109ba8cb9be",
         price_from=1299, rating=4.6, cruise_count=5, duration_range="10-16 Days"),
]

# (destination name, cruise)
CRUISES = [
    ("Caribbean", dict(
        title="Caribbean Paradise", description="7-Night Western Caribbean & Perfect Day",
        image_url="https://images.unsplash.com/photo-1548574505-5e239809ee19", departure_from="Miami, FL",
        duration=7, price_per_person=899, original_price=1199, cabin_type="Ocean View Stateroom",
        inclusions="All meals, Entertainment, Port charges", is_best_seller=True, rating=4.5,
        available_packages=["Premium Dining Package", "$200 Onboard Credit"])),
    ("Mediterranean", dict(
        title="Greek Isles Explorer", description="10-Night Greek Isles & Mediterranean Journey",
        image_url="https://images.unsplash.com/photo-1612456144614-8f2ebcc7bb40", departure_from="Rome, Italy",
        duration=10, price_per_person=1499, original_price=1799, cabin_type="Balcony Stateroom",
        inclusions="All meals, Entertainment, Port charges", is_new_itinerary=True, rating=5.0,
        available_packages=["Specialty Dining (3 meals)", "Shore Excursion Credit", "Drink Package"])),
    ("Alaska", dict(
        title="Alaskan Adventure", description="7-Night Glacier Experience",
        image_url="https://images.unsplash.com/photo-1531253450048-8e5e6a1d5db3", departure_from="Seattle, WA",
        duration=7, price_per_person=1099, original_price=1399, cabin_type="Balcony Stateroom",
        inclusions="All meals, Entertainment, Port charges", is_best_seller=True, rating=4.7,
        available_packages=["Wildlife Excursion Package", "Premium Beverage Package"])),
    ("Europe", dict(
        title="European Capitals", description="12-Night Tour of Historic Cities",
        image_url="https://images.unsplash.com/photo-1502920514313-52581002a659", departure_from="Southampton, UK",
        duration=12, price_per_person=1799, original_price=2199, cabin_type="Deluxe Balcony",
        inclusions="All meals, Entertainment, Port charges", is_new_itinerary=True, rating=4.8,
        available_packages=["City Tours Bundle", "Fine Dining Experience"])),
]

AMENITIES = [
    ("Gourmet Dining", "Savor exquisite cuisine prepared by world-class chefs in our specialty restaurants, "
     "with dishes inspired by global destinations.", "https://images.unsplash.com/photo-1593069567131-53a0614df2ea"),
    ("World-Class Entertainment", "Enjoy Broadway-style shows, live music, comedy performances, and themed "
     "parties throughout your cruise vacation.", "https://images.unsplash.com/photo-1591456983933-0cda86bbfec9"),
    ("Rejuvenating Spa", "Relax and refresh with our comprehensive spa treatments, thermal suites, and expert "
     "therapists for the ultimate relaxation.", "https://images.unsplash.com/photo-1610641818989-575305921886"),
    ("Adventure Activities", "Experience thrilling rock climbing walls, water slides, zip lines and more for "
     "adrenaline seekers of all ages.", "https://images.unsplash.com/photo-1566438480900-0609be27a4be"),
    ("Family-Friendly Zones", "Dedicated areas for children and teens with age-appropriate activities, games, "
     "and supervised programs.", "https://images.unsplash.com/photo-1596178065887-1198b6148b2b"),
    ("Luxury Shopping", "Browse high-end boutiques and duty-free shops featuring designer brands, jewelry, and "
     "exclusive souvenirs.", "https://images.unsplash.com/photo-1607083206968-13611e3d76db"),
]

TESTIMONIALS = [
    dict(name="Robert J.", cruise_name="Caribbean Paradise Cruise", rating=5,
         comment="Our Caribbean cruise exceeded all expectations. The staff was incredible, the food was amazing, "
                 "and the excursions were unforgettable. Already planning our next trip!",
         avatar_url="https://images.unsplash.com/photo-1492562080023-ab3db95bfbce"),
    dict(name="Jennifer M.", cruise_name="Greek Isles Explorer", rating=5,
         comment="The Mediterranean cruise was the perfect family vacation. My kids loved the onboard activities, "
                 "and my husband and I enjoyed the entertainment and shore excursions. Truly memorable!",
         avatar_url="https://images.unsplash.com/photo-1487412720507-e7ab37603c6f"),
    dict(name="Lisa & David T.", cruise_name="Alaska Adventure", rating=4,
         comment="As first-time cruisers, we were amazed by how smooth the entire experience was. The booking "
                 "process was easy, and the onboard service was top-notch. Definitely recommend OceanView!",
         avatar_url="https://images.unsplash.com/photo-1534528741775-53994a69daeb"),
]


def ensure_user(storage: Storage, username: str, email: str, password: str, role: UserRole):
    if storage.get_user_by_username(username) or storage.get_user_by_email(email):
        return
    storage.create_user(UserCreate(username=username, email=email, password_hash=hash_password(password), role=role))


def seed_catalog(storage: Storage) -> bool:
    """Load the sample catalog into an empty store. Returns False when it already has data."""
    if storage.get_destinations():
        return False

    ids = {}
    for data in DESTINATIONS:
        ids[data["name"]] = storage.create_destination(DestinationCreate(**data)).id
    for destination, data in CRUISES:
        storage.create_cruise(CruiseCreate(destination_id=ids[destination], **data))
    for name, description, image_url in AMENITIES:
        storage.create_amenity(AmenityCreate(name=name, description=description, image_url=image_url))
    for data in TESTIMONIALS:
        storage.create_testimonial(TestimonialCreate(**data))
    logger.info("seeded %d destinations and %d cruises", len(DESTINATIONS), len(CRUISES))
    return True


def run(storage: Storage | None = None):
    if storage is None:
        from oceanview.storage.factory import build_storage

        storage = build_storage(settings)

    seed_catalog(storage)
    # Demo staff accounts for local work only
    if settings.ENV.lower() != "production":
        ensure_user(storage, "admin", "admin@example.com", "admin12345", UserRole.admin)
        ensure_user(storage, "staff", "staff@example.com", "staff12345", UserRole.staff)
    return storage


if __name__ == "__main__":
    from oceanview.core.logging import configure_logging

    configure_logging()
    run()
