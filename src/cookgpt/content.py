"""Static marketing and policy pages."""

from pydantic import BaseModel


class ContentSection(BaseModel):
    heading: str
    body: str


class ContentPage(BaseModel):
    slug: str
    title: str
    last_updated: str | None = None
    sections: list[ContentSection]


PAGES: dict[str, ContentPage] = {
    "about": ContentPage(
        slug="about",
        title="About CookGPT",
        sections=[
            ContentSection(
                heading="What we do",
                body=(
                    "CookGPT creates personalized recipes and meal plans from your dietary "
                    "preferences, favourite cuisines, skill level and available time."
                ),
            ),
            ContentSection(
                heading="Our impact in the culinary world",
                body="50,000+ Active Users. 1M+ Recipes Generated. 95% User Satisfaction.",
            ),
            ContentSection(
                heading="Food Waste Reduction",
                body="Plans are built around what you already have so less food is thrown away.",
            ),
            ContentSection(
                heading="Get started",
                body="Start with the free trial. No credit card required.",
            ),
        ],
    ),
    "terms": ContentPage(
        slug="terms",
        title="Terms & Conditions",
        last_updated="16-09-2025 21:15:32",
        sections=[
            ContentSection(
                heading="1. Account Registration",
                body=(
                    "To access and use the Services, you agree to provide true, accurate and "
                    "complete information to us during and after registration, and you shall be "
                    "responsible for all acts done through the use of your registered account."
                ),
            ),
            ContentSection(
                heading="2. No Warranty",
                body=(
                    "Neither we nor any third parties provide any warranty or guarantee as to the "
                    "accuracy, timeliness, performance, completeness or suitability of the "
                    "information and materials offered through the Services."
                ),
            ),
            ContentSection(
                heading="3. Use at Your Own Risk",
                body=(
                    "Your use of our Services is solely at your own risk and discretion. You are "
                    "required to independently assess and ensure that the Services meet your "
                    "requirements."
                ),
            ),
            ContentSection(
                heading="4. Intellectual Property",
                body=(
                    "The contents of the Website and the Services are proprietary to us and you "
                    "will not have any authority to claim any intellectual property rights, "
                    "title, or interest in its contents."
                ),
            ),
            ContentSection(
                heading="5. Unauthorized Use",
                body=(
                    "Unauthorized use of the Website or the Services may lead to action against "
                    "you as per these Terms or applicable laws."
                ),
            ),
            ContentSection(
                heading="6. Payment",
                body="You agree to pay us the charges associated with availing the Services.",
            ),
            ContentSection(
                heading="7. Lawful Use",
                body=(
                    "You agree not to use the Services for any purpose that is unlawful, illegal "
                    "or forbidden by these Terms, or Indian or local laws that might apply to you."
                ),
            ),
            ContentSection(
                heading="8. Third Party Links",
                body=(
                    "The Services may contain links to third party websites, whose terms of use "
                    "and privacy policies govern your visit to them."
                ),
            ),
            ContentSection(
                heading="9. Binding Contract",
                body=(
                    "Upon initiating a transaction for availing the Services you are entering "
                    "into a legally binding and enforceable contract with us."
                ),
            ),
        ],
    ),
    "cancellation": ContentPage(
        slug="cancellation",
        title="Cancellation & Refund Policy",
        last_updated="16-09-2025 21:53:57",
        sections=[
            ContentSection(
                heading="Our Liberal Cancellation Policy",
                body="We believe in helping our customers as far as possible.",
            ),
            ContentSection(
                heading="Immediate Cancellation",
                body=(
                    "Cancellations will be considered only if the request is made immediately "
                    "after subscribing. Subscriptions can be cancelled before the next billing "
                    "cycle from the subscription page."
                ),
            ),
            ContentSection(
                heading="Refunds",
                body=(
                    "Approved refunds are processed to the original payment method within "
                    "a few business days."
                ),
            ),
        ],
    ),
}


def get_page(slug: str) -> ContentPage | None:
    return PAGES.get(slug)
