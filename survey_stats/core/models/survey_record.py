"""
Survey submission and record models.

A SurveySubmission is a validated set of form answers that has not been
stored yet. A SurveyRecord is the same submission once the record store has
assigned it an identifier and a submission timestamp.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class Food(str, Enum):
    """Fixed favourite-food vocabulary offered by the survey form."""

    PIZZA = "Pizza"
    PASTA = "Pasta"
    PAP_AND_WORS = "Pap and Wors"
    OTHER = "Other"


class Activity(str, Enum):
    """Lifestyle activities rated on a 1-5 scale."""

    EAT_OUT = "eat_out"
    WATCH_MOVIES = "watch_movies"
    WATCH_TV = "watch_tv"
    LISTEN_TO_RADIO = "listen_to_radio"


# Activity -> attribute holding its rating
ACTIVITY_FIELDS: dict[Activity, str] = {
    Activity.EAT_OUT: "eat_out_rating",
    Activity.WATCH_MOVIES: "watch_movies_rating",
    Activity.WATCH_TV: "watch_tv_rating",
    Activity.LISTEN_TO_RADIO: "listen_to_radio_rating",
}


class SurveySubmission(BaseModel):
    """
    One respondent's answers after validation, before persistence.

    Field aliases are the names the survey form posts, so a normalized
    form payload can be passed straight to ``model_validate``.

    Attributes:
        name: Respondent name
        email: Respondent email (unique across all records)
        age: Age in years
        date_of_birth: Date of birth (form field ``dob``)
        favorite_foods: Ordered, de-duplicated food selections
        eat_out_rating: Rating for eating out
        watch_movies_rating: Rating for watching movies
        watch_tv_rating: Rating for watching TV
        listen_to_radio_rating: Rating for listening to the radio
    """

    name: str
    email: str
    age: int
    date_of_birth: date = Field(..., alias="dob")
    favorite_foods: list[Food] = Field(..., min_length=1, alias="favoriteFoods")
    eat_out_rating: int = Field(..., alias="eatOutRating")
    watch_movies_rating: int = Field(..., alias="watchMoviesRating")
    watch_tv_rating: int = Field(..., alias="watchTVRating")
    listen_to_radio_rating: int = Field(..., alias="listenToRadioRating")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "Thandi Mokoena",
                "email": "thandi@example.com",
                "age": 29,
                "dob": "1996-03-14",
                "favoriteFoods": ["Pizza", "Pap and Wors"],
                "eatOutRating": 2,
                "watchMoviesRating": 1,
                "watchTVRating": 3,
                "listenToRadioRating": 4,
            }
        }

    def rating_for(self, activity: Activity) -> int:
        """Return the rating given to an activity."""
        return getattr(self, ACTIVITY_FIELDS[activity])

    def likes(self, food: Food) -> bool:
        return food in self.favorite_foods


class SurveyRecord(SurveySubmission):
    """
    A persisted survey submission.

    Attributes:
        id: Identifier assigned by the record store on insert
        submission_timestamp: Insert time (UTC), used for recency ordering
    """

    id: int
    submission_timestamp: datetime

    @classmethod
    def from_submission(
        cls, submission: SurveySubmission, record_id: int, submitted_at: datetime
    ) -> "SurveyRecord":
        """Build a stored record from a submission and store-assigned values."""
        return cls(
            **submission.model_dump(),
            id=record_id,
            submission_timestamp=submitted_at,
        )
