from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Airfield",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=10, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                ("elevation_m", models.FloatField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="WeatherThreshold",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("wind_speed_max", models.FloatField(blank=True, null=True)),
                ("temperature_min", models.FloatField(blank=True, null=True)),
                ("temperature_max", models.FloatField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("airfield", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="thresholds", to="core.airfield")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="weather_thresholds", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.AddConstraint(
            model_name="weatherthreshold",
            constraint=models.UniqueConstraint(fields=("user", "airfield"), name="unique_threshold_per_user_airfield"),
        ),
    ]
