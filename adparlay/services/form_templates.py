"""Built-in starting points for the form builder."""
import copy
from typing import Any, Dict, List, Optional

from adparlay.services.form_builder import duplicate_structure


def _q(qid: str, qtype: str, label: str, help_text: str, required: bool, block_id: str, options: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "id": qid,
        "type": qtype,
        "label": label,
        "helpText": help_text,
        "required": required,
        "isEditing": False,
        "blockId": block_id,
        "options": options or [],
        "conditionalLogic": [],
    }


def _b(block_id: str, title: str) -> Dict[str, Any]:
    return {"id": block_id, "title": title, "isEditing": False}


FORM_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "real-estate": {
        "name": "Real Estate Lead Generation",
        "icon": "🏠",
        "description": "Comprehensive form for collecting real estate leads with property preferences and contact details.",
        "blocks": [
            _b("block-contact", "Contact Information"),
            _b("block-preferences", "Property Preferences"),
            _b("block-timeline", "Timeline & Budget"),
            _b("block-additional", "Additional Information"),
        ],
        "questions": [
            _q("q-name", "text", "Full Name", "Please enter your full legal name", True, "block-contact"),
            _q("q-email", "email", "Email Address", "We'll send you property updates and market insights", True, "block-contact"),
            _q("q-phone", "phone", "Phone Number", "For urgent property notifications", True, "block-contact"),
            _q("q-property-type", "select", "What type of property are you looking for?", "Select the primary property type", True, "block-preferences",
               ["House", "Apartment/Condo", "Townhouse", "Land/Plot", "Commercial Property", "Investment Property"]),
            _q("q-location", "text", "Preferred Location/Area", "City, neighborhood, or specific area", True, "block-preferences"),
            _q("q-bedrooms", "select", "Number of Bedrooms", "How many bedrooms do you need?", True, "block-preferences",
               ["Studio", "1 Bedroom", "2 Bedrooms", "3 Bedrooms", "4+ Bedrooms"]),
            _q("q-amenities", "checkbox", "Must-Have Amenities", "Select all that apply", False, "block-preferences",
               ["Parking/Garage", "Garden/Yard", "Balcony/Terrace", "Air Conditioning", "Furnished", "Pet Friendly", "Swimming Pool", "Security System"]),
            _q("q-budget", "select", "What is your budget range?", "Select your approximate budget", True, "block-timeline",
               ["Under $200,000", "$200,000 - $400,000", "$400,000 - $600,000", "$600,000 - $800,000", "$800,000 - $1,000,000", "Over $1,000,000"]),
            _q("q-timeline", "select", "When do you plan to move?", "What's your ideal timeline?", True, "block-timeline",
               ["Immediately (within 1 month)", "Soon (1-3 months)", "Flexible (3-6 months)", "Planning ahead (6+ months)"]),
            _q("q-financing", "radio", "How do you plan to finance this purchase?", "Select your primary financing method", True, "block-timeline",
               ["Cash", "Mortgage", "Rent-to-Own", "Investment Partner", "Not Sure Yet"]),
            _q("q-motivation", "select", "What's your primary motivation for buying?", "This helps us find the perfect property for you", True, "block-additional",
               ["First-time homebuyer", "Upgrading to larger home", "Downsizing", "Investment/Income property", "Relocation for work", "Retirement planning", "Other"]),
            _q("q-additional-notes", "textarea", "Additional Requirements or Notes", "Anything else you'd like to share", False, "block-additional"),
        ],
        "media": {"type": "", "url": "", "primaryText": "Find Your Dream Home", "secondaryText": "Let us help you discover the perfect property"},
    },
    "event-registration": {
        "name": "Event Registration & RSVP",
        "icon": "🎉",
        "description": "Complete event registration form with dietary preferences and session selections.",
        "blocks": [
            _b("block-personal", "Personal Information"),
            _b("block-event", "Event Details"),
            _b("block-dietary", "Dietary & Accessibility"),
            _b("block-additional", "Additional Information"),
        ],
        "questions": [
            _q("q-name", "text", "Full Name", "As it appears on your ID", True, "block-personal"),
            _q("q-email", "email", "Email Address", "For event updates and confirmations", True, "block-personal"),
            _q("q-phone", "phone", "Phone Number", "For urgent event communications", True, "block-personal"),
            _q("q-company", "text", "Company/Organization", "Where you work or represent", False, "block-personal"),
            _q("q-attendance", "radio", "Will you be attending?", "Please confirm your attendance", True, "block-event",
               ["Yes, I will attend", "No, I cannot attend", "Maybe, I'll confirm later"]),
            _q("q-ticket-type", "select", "Ticket Type", "Select your preferred ticket category", True, "block-event",
               ["General Admission ($50)", "VIP Access ($150)", "Student Discount ($25)", "Early Bird ($35)", "Group Rate (4+ people)"]),
            _q("q-sessions", "checkbox", "Interested Sessions/Workshops", "Select all sessions you'd like to attend", False, "block-event",
               ["Keynote Speech", "Networking Session", "Workshop A: Digital Marketing", "Workshop B: Business Strategy", "Panel Discussion", "Social Mixer"]),
            _q("q-dietary", "select", "Dietary Requirements", "For catering purposes", False, "block-dietary",
               ["No special requirements", "Vegetarian", "Vegan", "Gluten-free", "Halal", "Kosher", "Other (please specify)"]),
            _q("q-accessibility", "checkbox", "Accessibility Requirements", "Select if you need any accessibility accommodations", False, "block-dietary",
               ["Wheelchair access needed", "Sign language interpreter", "Large print materials", "Assistive listening device", "Other accessibility needs"]),
            _q("q-how-heard", "select", "How did you hear about this event?", "This helps us improve our marketing", False, "block-additional",
               ["Social Media", "Email Newsletter", "Website", "Friend/Colleague", "Advertisement", "Search Engine", "Other"]),
            _q("q-expectations", "textarea", "What do you hope to gain from this event?", "Your goals help us tailor the experience", False, "block-additional"),
        ],
        "media": {"type": "", "url": "", "primaryText": "Join Us for an Amazing Event", "secondaryText": "Register now to secure your spot"},
    },
    "customer-feedback": {
        "name": "Customer Feedback & Survey",
        "icon": "📊",
        "description": "Detailed customer feedback form with satisfaction ratings and improvement suggestions.",
        "blocks": [
            _b("block-experience", "Your Experience"),
            _b("block-satisfaction", "Satisfaction & Ratings"),
            _b("block-improvement", "Improvement Suggestions"),
            _b("block-contact", "Stay Connected"),
        ],
        "questions": [
            _q("q-service-used", "select", "Which of our services did you use?", "Select the main one", True, "block-experience",
               ["Product Purchase", "Consultation Service", "Support/Help Desk", "Training/Workshop", "Custom Development", "Other"]),
            _q("q-usage-frequency", "radio", "How often do you use our services?", "Your usage pattern helps us understand your needs", True, "block-experience",
               ["First time user", "Occasionally (few times a year)", "Regularly (monthly)", "Frequently (weekly)", "Daily user"]),
            _q("q-overall-satisfaction", "radio", "Overall, how satisfied are you with our service?", "Rate your overall experience", True, "block-satisfaction",
               ["Very Satisfied", "Satisfied", "Neutral", "Dissatisfied", "Very Dissatisfied"]),
            _q("q-quality-rating", "rating", "How would you rate the quality of our service?", "1 = Poor, 5 = Excellent", True, "block-satisfaction",
               ["1", "2", "3", "4", "5"]),
            _q("q-recommend", "radio", "How likely are you to recommend us to others?", "Your recommendation likelihood", True, "block-satisfaction",
               ["Very Likely", "Likely", "Neutral", "Unlikely", "Very Unlikely"]),
            _q("q-improvement-areas", "checkbox", "What areas could we improve?", "Select areas that need attention", False, "block-improvement",
               ["Website/App functionality", "Customer service response time", "Product quality", "Pricing", "Communication", "Technical support"]),
            _q("q-features-wanted", "textarea", "What new features or services would you like to see?", "Your suggestions help us innovate", False, "block-improvement"),
            _q("q-email-updates", "radio", "Would you like to receive updates about new features and services?", "Stay informed about our latest offerings", False, "block-contact",
               ["Yes, please send me updates", "No, thank you", "Only important announcements"]),
            _q("q-contact-email", "email", "Email Address", "Where should we send updates?", False, "block-contact"),
        ],
        "media": {"type": "", "url": "", "primaryText": "We Value Your Feedback", "secondaryText": "Help us improve by sharing your experience"},
    },
}


def list_templates() -> List[Dict[str, Any]]:
    return [
        {
            "key": key,
            "name": template["name"],
            "icon": template["icon"],
            "description": template["description"],
            "blocks": len(template["blocks"]),
            "questions": len(template["questions"]),
        }
        for key, template in FORM_TEMPLATES.items()
    ]


def instantiate_template(key: str) -> Dict[str, Any]:
    """Form fields for a new form built from template ``key`` (fresh block and question ids)."""
    template = FORM_TEMPLATES[key]
    blocks, questions = duplicate_structure(template["blocks"], template["questions"])
    return {
        "title": template["name"],
        "form_name": template["name"],
        "blocks": blocks,
        "questions": questions,
        "media": copy.deepcopy(template["media"]),
        "form_style": {},
    }
