from django.db import models


class OrderModel(models.Model):
    # Integer PK; callers may supply it, otherwise the DB assigns it
    id = models.BigAutoField(primary_key=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "orders"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=0), name="orders_amount_non_negative"
            ),
        ]
