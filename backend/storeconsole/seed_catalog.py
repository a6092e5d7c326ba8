# Overview: Starter category taxonomy loaded by `flask catalog seed-categories`.

DEFAULT_CATEGORIES = [
    {
        "name": "Saree",
        "description": "Traditional Indian sarees in various styles and materials",
        "sub_categories": [
            {"name": "Silk Sarees", "description": "Premium silk sarees"},
            {"name": "Cotton Sarees", "description": "Comfortable cotton sarees"},
            {"name": "Georgette Sarees", "description": "Elegant georgette sarees"},
            {"name": "Designer Sarees", "description": "Exclusive designer collection"},
            {"name": "Bridal Sarees", "description": "Special bridal sarees"},
        ],
    },
    {
        "name": "Clothes",
        "description": "Western and Indian clothing for all ages",
        "sub_categories": [
            {"name": "Kurtis", "description": "Traditional kurtis"},
            {"name": "Salwar Kameez", "description": "Complete salwar kameez sets"},
            {"name": "Dresses", "description": "Western dresses"},
            {"name": "Tops", "description": "Casual and party tops"},
            {"name": "Pants & Jeans", "description": "Bottom wear"},
            {"name": "Kids Wear", "description": "Clothing for children"},
        ],
    },
    {
        "name": "Kirana",
        "description": "Daily household grocery items",
        "sub_categories": [
            {"name": "Pulses & Grains", "description": "Dal, rice, wheat, etc."},
            {"name": "Cooking Oil", "description": "Various cooking oils"},
            {"name": "Spices & Masalas", "description": "Whole and ground spices"},
            {"name": "Sugar & Salt", "description": "Basic cooking essentials"},
            {"name": "Tea & Coffee", "description": "Beverage items"},
            {"name": "Snacks", "description": "Packaged snacks"},
            {"name": "Beverages", "description": "Soft drinks and juices"},
            {"name": "Personal Care", "description": "Soaps, shampoos, etc."},
        ],
    },
    {
        "name": "Sleepers",
        "description": "Comfortable footwear for home and casual wear",
        "sub_categories": [
            {"name": "Men's Sleepers", "description": "Sleepers for men"},
            {"name": "Women's Sleepers", "description": "Sleepers for women"},
            {"name": "Kids Sleepers", "description": "Sleepers for children"},
            {"name": "Designer Sleepers", "description": "Fashionable sleepers"},
            {"name": "Sports Sleepers", "description": "Athletic footwear"},
        ],
    },
    {
        "name": "Bangles",
        "description": "Traditional and modern bangles for women",
        "sub_categories": [
            {"name": "Glass Bangles", "description": "Traditional glass bangles"},
            {"name": "Metal Bangles", "description": "Gold, silver, and other metals"},
            {"name": "Plastic Bangles", "description": "Colorful plastic bangles"},
            {"name": "Designer Bangles", "description": "Fashionable designer bangles"},
            {"name": "Bridal Bangles", "description": "Special bridal collection"},
        ],
    },
    {
        "name": "Pooja Items",
        "description": "Religious and spiritual items for prayers",
        "sub_categories": [
            {"name": "Incense & Agarbatti", "description": "Various types of incense"},
            {"name": "Diyas & Candles", "description": "Oil lamps and candles"},
            {"name": "Idols & Pictures", "description": "Religious idols and images"},
            {"name": "Pooja Thali", "description": "Complete pooja sets"},
            {"name": "Kumkum & Chandan", "description": "Religious powders"},
            {"name": "Flowers & Garlands", "description": "Fresh and artificial flowers"},
        ],
    },
    {
        "name": "Jewelry",
        "description": "Traditional and modern jewelry pieces",
        "sub_categories": [
            {"name": "Necklaces", "description": "Various necklaces and chains"},
            {"name": "Earrings", "description": "Traditional and modern earrings"},
            {"name": "Rings", "description": "Finger rings"},
            {"name": "Anklets", "description": "Foot jewelry"},
            {"name": "Nose Pins", "description": "Nose jewelry"},
            {"name": "Hair Accessories", "description": "Hair clips and pins"},
        ],
    },
    {
        "name": "Home & Kitchen",
        "description": "Household and kitchen essentials",
        "sub_categories": [
            {"name": "Kitchen Utensils", "description": "Cooking and serving utensils"},
            {"name": "Storage Containers", "description": "Food storage solutions"},
            {"name": "Cleaning Supplies", "description": "Household cleaning items"},
            {"name": "Bedding", "description": "Bed sheets, pillows, etc."},
            {"name": "Bathroom Items", "description": "Bathroom essentials"},
            {"name": "Home Decor", "description": "Decorative items"},
        ],
    },
]
