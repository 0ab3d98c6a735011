from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Alert",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("alert_type", models.CharField(choices=[("wind", "Wind"), ("temperature", "Temperature"), ("visibility", "Visibility"), ("weather", "Weather"), ("storm", "Storm")], max_length=20)),
                ("severity", models.CharField(choices=[("low", "Low"), ("medium", "Medium"), ("high", "High"), ("critical", "Critical")], max_length=10)),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField()),
                ("threshold_value", models.FloatField(blank=True, null=True)),
                ("actual_value", models.FloatField(blank=True, null=True)),
                ("confidence_score", models.PositiveSmallIntegerField(default=100)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("acknowledged_at", models.DateTimeField(blank=True, null=True)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("airfield", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="alerts", to="core.airfield")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="weather_alerts", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "airfield", "is_active"], name="alert_user_airfield_active_idx")],
            },
        ),
    ]
