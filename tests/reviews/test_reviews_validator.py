"""
Test suite for review submission validation
All rules are checked at once and reported per field.
"""

from django.test import SimpleTestCase

from apps.reviews.validators import ReviewSubmissionValidator, ReviewValidationError
from tests.factories.core import build_review_payload, build_scorecard


class BaseRulesTestCase(SimpleTestCase):
    """Rules every review must satisfy regardless of package"""

    def setUp(self):
        self.validator = ReviewSubmissionValidator(required_types=[])

    def _errors(self, **overrides):
        result = self.validator.validate(build_review_payload(**overrides))
        self.assertTrue(result.is_err())
        return result.unwrap_err().errors

    def test_valid_payload(self):
        submission = self.validator.validate(build_review_payload()).unwrap()
        self.assertEqual(submission.overall_rating, 4)
        self.assertEqual(len(submission.scorecard), 16)
        self.assertEqual(submission.highlights, ['Great hook'])

    def test_summary_minimum_length(self):
        errors = self._errors(summary='x' * 99)
        self.assertEqual(errors['summary'], ['Summary must be at least 100 characters (currently 99 characters)'])

    def test_summary_whitespace_not_counted(self):
        errors = self._errors(summary=' ' * 50 + 'x' * 99 + ' ' * 50)
        self.assertIn('summary', errors)

    def test_at_least_one_tag(self):
        for tags in ([], ['', '  '], None, 'rock'):
            with self.subTest(tags=tags):
                self.assertIn('tags', self._errors(tags=tags))

    def test_tags_deduplicated(self):
        submission = self.validator.validate(build_review_payload(tags=['rock', ' rock ', 'pop'])).unwrap()
        self.assertEqual(submission.tags, ['rock', 'pop'])

    def test_rating_range(self):
        for rating in (0, 6, 3.5, '4', True, None):
            with self.subTest(rating=rating):
                self.assertIn('overall_rating', self._errors(overall_rating=rating))

    def test_rating_bounds_accepted(self):
        for rating in (1, 5, 5.0):
            with self.subTest(rating=rating):
                self.assertTrue(self.validator.validate(build_review_payload(overall_rating=rating)).is_ok())

    def test_scorecard_must_have_sixteen_entries(self):
        for size in (0, 15, 17):
            with self.subTest(size=size):
                errors = self._errors(scorecard=build_scorecard(size))
                self.assertIn(f'Scorecard must have exactly 16 entries (currently {size})', errors['scorecard'])

    def test_scorecard_entries_need_metric_and_score(self):
        scorecard = build_scorecard()
        scorecard[3] = {'metric': '', 'score': 5}
        scorecard[7] = {'metric': 'Mix', 'score': -1}
        scorecard[9] = {'metric': 'Vocals', 'score': 'high'}

        errors = self._errors(scorecard=scorecard)

        self.assertEqual(
            errors['scorecard'],
            [
                'Entry 4: metric name is required',
                'Entry 8: score must be a number of at least 0',
                'Entry 10: score must be a number of at least 0',
            ],
        )

    def test_reviewer_title_required(self):
        self.assertIn('reviewer_title', self._errors(reviewer_title='  '))

    def test_all_failures_reported_together(self):
        errors = self._errors(summary='short', tags=[], overall_rating=9)
        self.assertEqual(set(errors), {'summary', 'tags', 'overall_rating'})

    def test_error_message_joins_every_failure(self):
        error = self.validator.validate(build_review_payload(summary='short', tags=[])).unwrap_err()
        self.assertIsInstance(error, ReviewValidationError)
        self.assertEqual(error.field, 'summary')
        self.assertIn('At least one tag is required', error.message)

    def test_non_dict_payload(self):
        self.assertTrue(self.validator.validate(['not', 'a', 'dict']).is_err())

    def test_written_not_checked_when_not_required(self):
        self.assertTrue(self.validator.validate(build_review_payload(written_feedback='')).is_ok())


class PackageRulesTestCase(SimpleTestCase):
    """Rules that depend on the review types a package promises"""

    def test_written_900_characters_needs_100_more(self):
        validator = ReviewSubmissionValidator(required_types=['written'])

        errors = validator.validate(build_review_payload(written_feedback='w' * 900)).unwrap_err().errors

        self.assertEqual(
            errors['written_feedback'],
            ['Written review must be at least 1000 characters (currently 900 characters, 100 more needed)'],
        )

    def test_written_exactly_minimum(self):
        validator = ReviewSubmissionValidator(required_types=['written'])
        self.assertTrue(validator.validate(build_review_payload(written_feedback='w' * 1000)).is_ok())

    def test_required_scorecard_adds_package_message(self):
        validator = ReviewSubmissionValidator(required_types=['scorecard'])
        errors = validator.validate(build_review_payload(scorecard=[])).unwrap_err().errors
        self.assertEqual(len(errors['scorecard']), 2)

    def test_video_required(self):
        validator = ReviewSubmissionValidator(required_types=['video'])

        errors = validator.validate(build_review_payload()).unwrap_err().errors

        self.assertIn('media_type', errors)
        self.assertEqual(
            errors['video_url'], ['Video review is required for this package. Please upload an MP4 file.']
        )
        self.assertIn('media_title', errors)

    def test_video_must_be_mp4(self):
        validator = ReviewSubmissionValidator(required_types=['video'])
        payload = build_review_payload(media_type='video', video_url='https://cdn.example.com/r.mov', media_title='Take 1')

        errors = validator.validate(payload).unwrap_err().errors

        self.assertEqual(errors, {'video_url': ['Video review must be in MP4 format']})

    def test_valid_video(self):
        validator = ReviewSubmissionValidator(required_types=['video'])
        for url in ('https://cdn.example.com/review.MP4', 'https://cdn.example.com/blob?type=video/mp4'):
            with self.subTest(url=url):
                payload = build_review_payload(media_type='video', video_url=url, media_title='Take 1')
                submission = validator.validate(payload).unwrap()
                self.assertEqual(submission.media_type, 'video')

    def test_audio_must_be_mp3(self):
        validator = ReviewSubmissionValidator(required_types=['audio'])
        payload = build_review_payload(media_type='audio', audio_url='https://cdn.example.com/r.wav', media_title='Notes')
        self.assertEqual(
            validator.validate(payload).unwrap_err().errors, {'audio_url': ['Audio review must be in MP3 format']}
        )

    def test_valid_audio(self):
        validator = ReviewSubmissionValidator(required_types=['audio'])
        payload = build_review_payload(media_type='audio', audio_url='https://cdn.example.com/r.mp3', media_title='Notes')
        self.assertTrue(validator.validate(payload).is_ok())

    def test_media_ignored_when_not_required(self):
        validator = ReviewSubmissionValidator(required_types=[])
        payload = build_review_payload(media_type='hologram', video_url='x')
        self.assertEqual(validator.validate(payload).unwrap().media_type, '')

    def test_rule_overrides(self):
        validator = ReviewSubmissionValidator(required_types=['written'], rules={'WRITTEN_MIN_LENGTH': 10})
        self.assertTrue(validator.validate(build_review_payload(written_feedback='w' * 10)).is_ok())


class FieldLengthTestCase(SimpleTestCase):
    """Values that fit the validator must also fit the review columns"""

    def test_overlong_title_rejected(self):
        result = ReviewSubmissionValidator(required_types=[]).validate(build_review_payload(reviewer_title='T' * 201))
        self.assertEqual(
            result.unwrap_err().errors['reviewer_title'],
            ['Reviewer title must be at most 200 characters (currently 201 characters)'],
        )

    def test_title_at_limit_accepted(self):
        result = ReviewSubmissionValidator(required_types=[]).validate(build_review_payload(reviewer_title='T' * 200))
        self.assertTrue(result.is_ok())

    def test_overlong_video_fields_rejected(self):
        url = 'https://cdn.example.com/' + 'v' * 600 + '.mp4'
        payload = build_review_payload(media_type='video', video_url=url, media_title='M' * 300)

        errors = ReviewSubmissionValidator(required_types=['video']).validate(payload).unwrap_err().errors

        self.assertIn(f'Video url must be at most 500 characters (currently {len(url)} characters)', errors['video_url'])
        self.assertIn('Media title must be at most 200 characters (currently 300 characters)', errors['media_title'])

    def test_optional_audio_url_still_bounded(self):
        url = 'https://cdn.example.com/' + 'a' * 500 + '.mp3'
        result = ReviewSubmissionValidator(required_types=[]).validate(build_review_payload(audio_url=url))
        self.assertIn('audio_url', result.unwrap_err().errors)
